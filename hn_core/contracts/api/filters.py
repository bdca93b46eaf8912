# hn_core/contracts/api/filters.py
import django_filters

from hn_core.contracts.models import Contract, ContractableType, ContractStatus


class ContractFilter(django_filters.FilterSet):
    status = django_filters.MultipleChoiceFilter(choices=ContractStatus.choices)
    contractable_type = django_filters.ChoiceFilter(choices=ContractableType.choices)
    contractable_id = django_filters.CharFilter()
    is_signed = django_filters.BooleanFilter()
    updated_after = django_filters.IsoDateTimeFilter(field_name="updated_at", lookup_expr="gte")
    updated_before = django_filters.IsoDateTimeFilter(field_name="updated_at", lookup_expr="lt")

    class Meta:
        model = Contract
        fields = ["status", "contractable_type", "contractable_id", "is_signed"]
