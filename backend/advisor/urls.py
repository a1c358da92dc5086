"""
URL configuration for the advisor app.
"""

from django.urls import path
from . import views

urlpatterns = [
    path('', views.api_info, name='api-info'),
    path('advisor/priority/', views.suggest_priority, name='suggest-priority'),
    path('advisor/insights/', views.task_insights, name='task-insights'),
    path('advisor/insights/stored/', views.stored_task_insights, name='stored-task-insights'),
    path('advisor/status/', views.classifier_status, name='classifier-status'),
]
