from django.urls import path
from .views import (
    ApplicationStatusView, ApplyJobView, DashboardView,
    JobDetailView, JobListView, JobToggleView
)

urlpatterns = [
    # Public & Employer
    path('', JobListView.as_view(), name='job-list'),  # GET (active jobs), POST (create)
    path('<int:pk>/', JobDetailView.as_view(), name='job-detail'),  # PUT, DELETE
    path('<int:pk>/toggle/', JobToggleView.as_view(), name='job-toggle'),

    # Seeker
    path('<int:pk>/apply/', ApplyJobView.as_view(), name='job-apply'),

    # Dashboard
    path('dashboard/', DashboardView.as_view(), name='dashboard'),
    path('applications/<int:pk>/status/', ApplicationStatusView.as_view(), name='application-status'),
]
