"""
Serializers for the advisor API.

Request validation lives here. Task payloads sent for insights are accepted
leniently: malformed deadlines and priorities are passed through and the
advisor treats them as absent instead of rejecting the whole collection.
"""

from rest_framework import serializers

from .records import parse_instant


class PriorityRequestSerializer(serializers.Serializer):
    """
    Serializer for a single task submitted for priority scoring.
    """

    title = serializers.CharField(max_length=255, allow_blank=True, trim_whitespace=False)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    deadline = serializers.CharField(required=False, allow_null=True, allow_blank=True)

    def validate_deadline(self, value):
        """Ensure a given deadline is an ISO 8601 date or datetime."""
        if value in (None, ''):
            return None
        parsed = parse_instant(value)
        if parsed is None:
            raise serializers.ValidationError(
                "Deadline must be an ISO 8601 date or datetime"
            )
        return parsed


class TaskInputSerializer(serializers.Serializer):
    """
    Serializer for a task included in an insights request.
    """

    id = serializers.CharField(required=False, allow_null=True)
    title = serializers.CharField(required=False, allow_blank=True, default='')
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    # Raw JSON values; the advisor drops anything it cannot interpret
    priority = serializers.JSONField(required=False, allow_null=True, default='none')
    category = serializers.CharField(required=False, allow_blank=True, default='')
    deadline = serializers.JSONField(required=False, allow_null=True)
    completed = serializers.BooleanField(required=False, default=False)
    created_at = serializers.JSONField(required=False, allow_null=True)


class InsightsRequestSerializer(serializers.Serializer):
    """
    Serializer for portfolio insights requests. An empty list is valid.
    """

    tasks = serializers.ListField(
        child=TaskInputSerializer(),
        allow_empty=True
    )


class PriorityVerdictSerializer(serializers.Serializer):
    """
    Serializer for priority verdict output.
    """

    suggested_priority = serializers.CharField()
    confidence = serializers.FloatField()
    reasoning = serializers.CharField()
    reasoning_steps = serializers.ListField(child=serializers.CharField())
    score = serializers.FloatField()
    ai_adjusted = serializers.BooleanField()


class PortfolioReportSerializer(serializers.Serializer):
    """
    Serializer for insights output.
    """

    insights = serializers.ListField(child=serializers.CharField())
    recommendations = serializers.ListField(child=serializers.CharField())
    stats = serializers.DictField()
    advisor_status = serializers.CharField()
