from rest_framework import serializers
from .models import Agent, Performance


class AgentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Agent
        fields = ['id', 'name', 'email', 'category', 'is_active', 'created_at', 'updated_at']


class PerformanceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Performance
        fields = ['id', 'agent', 'timestamp'] + [
            field
            for score in Performance.SCORE_FIELDS
            for field in (score, f'{score}_remarks')
        ]


class AgentListSerializer(AgentSerializer):
    """Agent with the most recent score card, if any"""
    latest_performance = serializers.SerializerMethodField()

    class Meta(AgentSerializer.Meta):
        fields = AgentSerializer.Meta.fields + ['latest_performance']

    def get_latest_performance(self, obj):
        # performances are prefetched newest first
        performances = list(obj.performances.all())
        if not performances:
            return None
        return PerformanceSerializer(performances[0]).data
