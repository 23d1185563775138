from rest_framework import serializers


class OrderStatusCountSerializer(serializers.Serializer):
    status = serializers.CharField()
    status_display = serializers.CharField()
    count = serializers.IntegerField()
    percentage = serializers.DecimalField(max_digits=5, decimal_places=2)


class OrderStatsSerializer(serializers.Serializer):
    date = serializers.DateField()
    total_orders = serializers.IntegerField()
    orders_today = serializers.IntegerField()
    status_counts = OrderStatusCountSerializer(many=True)
    total_revenue = serializers.DecimalField(max_digits=12, decimal_places=2)
    daily_revenue = serializers.DecimalField(max_digits=12, decimal_places=2)
