"""
API Views for the Smart Task Advisor.

This module exposes the priority advisor and the productivity insights over
REST with request validation, rate limiting and OpenAPI documentation.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, throttle_classes
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from django.utils import timezone

from .classifier import ClassifierStatus
from .errors import ErrorCode, error_code_for, validation_errors
from .serializers import (
    InsightsRequestSerializer,
    PortfolioReportSerializer,
    PriorityRequestSerializer,
    PriorityVerdictSerializer
)
from .services import (
    advisor_status,
    analyze_portfolio,
    initialize_advisor,
    portfolio_stats,
    score_priority
)
from .records import to_records
from .store import iter_task_records


logger = logging.getLogger(__name__)


# ============================================
# RATE LIMITING CLASSES
# ============================================

class PriorityRateThrottle(AnonRateThrottle):
    """Rate limit for the priority endpoint."""
    scope = 'priority'


class InsightsRateThrottle(AnonRateThrottle):
    """Rate limit for the insights endpoints."""
    scope = 'insights'


def _invalid(serializer) -> Response:
    return Response(
        {
            'success': False,
            'error_code': error_code_for(serializer.errors).value,
            'errors': serializer.errors,
            'details': [e.to_dict() for e in validation_errors(serializer.errors)],
            'message': 'Invalid input data. Please check your request format.'
        },
        status=status.HTTP_400_BAD_REQUEST
    )


def _insights_response(records) -> Response:
    now = timezone.now()
    report = analyze_portfolio(records, now)
    stats = portfolio_stats(records, now)

    return Response({
        'success': True,
        'error_code': ErrorCode.SUCCESS.value,
        'count': stats.total,
        **report.to_dict(),
        'stats': stats.to_dict(),
        'advisor_status': advisor_status().value
    })


# ============================================
# API ENDPOINTS
# ============================================

@extend_schema(
    summary="Suggest a priority for a task",
    description="""
    Score a task from its title, description and deadline.

    Returns the suggested priority class, a confidence between 0 and 1 and
    the reasoning behind the suggestion. When a text classifier is loaded,
    urgency-related emotion in the text adds to the score.
    """,
    request=PriorityRequestSerializer,
    responses={200: PriorityVerdictSerializer},
    tags=['Advisor']
)
@api_view(['POST'])
@throttle_classes([PriorityRateThrottle])
def suggest_priority(request: Request) -> Response:
    """
    Suggest a priority for a single task.

    POST /api/advisor/priority/

    Request Body:
    {
        "title": "Submit report to client",
        "description": "Quarterly numbers",     // Optional
        "deadline": "2025-01-10T12:00:00Z"      // Optional, ISO 8601
    }
    """
    serializer = PriorityRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)

    data = serializer.validated_data
    initialize_advisor()

    verdict = score_priority(
        data['title'],
        data.get('description'),
        data.get('deadline')
    )
    logger.debug(
        "Suggested %s (%.2f) for %r",
        verdict.suggested_priority.value, verdict.confidence, data['title']
    )

    return Response({
        'success': True,
        'error_code': ErrorCode.SUCCESS.value,
        **verdict.to_dict(),
        'advisor_status': advisor_status().value
    })


@extend_schema(
    summary="Productivity insights for submitted tasks",
    description="""
    Analyze a list of tasks and return insights, recommendations and
    summary statistics. An empty list returns placeholder guidance.
    """,
    request=InsightsRequestSerializer,
    responses={200: PortfolioReportSerializer},
    tags=['Insights']
)
@api_view(['POST'])
@throttle_classes([InsightsRateThrottle])
def task_insights(request: Request) -> Response:
    """
    Analyze a submitted task list.

    POST /api/advisor/insights/

    Request Body:
    {
        "tasks": [
            {"id": "1", "title": "...", "priority": "high", "category": "work",
             "deadline": "2025-01-05T00:00:00Z", "completed": false}
        ]
    }
    """
    serializer = InsightsRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)

    return _insights_response(to_records(serializer.validated_data['tasks']))


@extend_schema(
    summary="Productivity insights for stored tasks",
    description="Analyze the tasks in the task store.",
    parameters=[
        OpenApiParameter(
            name='category',
            type=OpenApiTypes.STR,
            location=OpenApiParameter.QUERY,
            required=False,
            description='Only analyze this category ("all" analyzes every task)'
        )
    ],
    responses={200: PortfolioReportSerializer},
    tags=['Insights']
)
@api_view(['GET'])
@throttle_classes([InsightsRateThrottle])
def stored_task_insights(request: Request) -> Response:
    """
    Analyze the stored tasks.

    GET /api/advisor/insights/stored/?category=work
    """
    category = request.query_params.get('category')
    return _insights_response(list(iter_task_records(category)))


@extend_schema(
    summary="Classifier status",
    description="Initialize the optional text classifier if needed and report its status.",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Advisor']
)
@api_view(['GET'])
def classifier_status(request: Request) -> Response:
    """
    Report whether the text classifier is in use.

    GET /api/advisor/status/
    """
    current = initialize_advisor()
    return Response({
        'success': True,
        'status': current.value,
        'ai_enabled': current == ClassifierStatus.READY
    })


@extend_schema(
    summary="API information",
    description="Get API information and available endpoints.",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Info']
)
@api_view(['GET'])
def api_info(request: Request) -> Response:
    """
    Return API information and available endpoints.

    GET /api/
    """
    return Response({
        'name': 'Smart Task Advisor API',
        'version': '1.0.0',
        'documentation': '/api/docs/',
        'features': [
            'Keyword and deadline based priority suggestions',
            'Optional emotion classifier boost',
            'Human-readable reasoning',
            'Productivity insights and recommendations',
            'Completion, overdue and category statistics',
            'Rate limiting',
            'OpenAPI/Swagger documentation'
        ],
        'endpoints': {
            'POST /api/advisor/priority/': 'Suggest a priority for a task',
            'POST /api/advisor/insights/': 'Insights for submitted tasks',
            'GET /api/advisor/insights/stored/': 'Insights for stored tasks',
            'GET /api/advisor/status/': 'Text classifier status',
            'GET /api/docs/': 'Interactive API documentation',
            'GET /api/schema/': 'OpenAPI schema',
            'GET /api/': 'This info endpoint'
        },
        'error_codes': {
            code.value: code.name for code in ErrorCode
        }
    })
