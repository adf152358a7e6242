import django_filters

from modules.customers.models import Customer


class CustomerFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    email = django_filters.CharFilter(field_name="email", lookup_expr="iexact")
    min_orders = django_filters.NumberFilter(field_name="total_orders", lookup_expr="gte")

    class Meta:
        model = Customer
        fields = ["name", "email", "min_orders"]
