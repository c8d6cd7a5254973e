from django.http import Http404
from rest_framework import status

from jobboard_core.views import ScreenAPIView
from users.permissions import HasProfile, HasProfileOrReadOnly
from . import rules
from .controllers import ALREADY_APPLIED, ApplyController, DashboardController, JobFormController, JobsController
from .filters import JobFilter
from .serializers import ApplicationStatusSerializer, JobFilterSerializer
from .services import JobService
from .viewmodels import shape_job

# --- JOB LISTINGS ---


class JobListView(ScreenAPIView):
    """
    GET: Public list of active jobs, filtered by ?search=&job_type=&location=
         (&selected=<id> opens the detail modal).
    POST: Employer posts a new job.
    """
    permission_classes = [HasProfileOrReadOnly]

    def get(self, request):
        params = JobFilterSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        controller = self.mount(JobsController(self.get_session(), JobFilter.from_params(params.validated_data)))
        selected = request.query_params.get('selected')
        if selected and selected.isdigit():
            controller.select(int(selected))
        return self.render(controller, self.load_status(controller))

    def post(self, request):
        controller = self.mount(JobFormController(self.get_session()))
        controller.update_form(**self.form_data())
        if self.run(controller.submit):
            return self.render(controller, status.HTTP_201_CREATED)
        return self.render(controller, self.failure_status(controller))


class VisibleJobMixin:

    def get_job(self, pk):
        """The job as a card; 404 when missing or unpublished and not the caller's own."""
        row = JobService.get_job(pk)
        if row is None or not rules.can_view_job(self.get_session().profile, row):
            raise Http404("Job not found.")
        return shape_job(row)


class JobDetailView(VisibleJobMixin, ScreenAPIView):
    """
    PUT: Edit a posting (owner only).
    DELETE: Remove a posting and its applications (owner only).
    """
    permission_classes = [HasProfile]

    def put(self, request, pk):
        controller = self.mount(JobFormController(self.get_session(), self.get_job(pk)))
        controller.update_form(**self.form_data())
        if self.run(controller.submit):
            return self.render(controller)
        return self.render(controller, self.failure_status(controller))

    def delete(self, request, pk):
        controller = self.mount(DashboardController(self.get_session()))
        if self.run(controller.delete_job, pk):
            return self.render(controller)
        return self.render(controller, self.failure_status(controller))


class JobToggleView(ScreenAPIView):
    """Open or close a posting to new applications."""
    permission_classes = [HasProfile]

    def post(self, request, pk):
        controller = self.mount(DashboardController(self.get_session()))
        if self.run(controller.toggle_job_status, pk):
            return self.render(controller)
        return self.render(controller, self.failure_status(controller))


# --- SEEKER ACTIONS ---


class ApplyJobView(VisibleJobMixin, ScreenAPIView):
    """
    Apply for a specific job ID.
    POST { "cover_letter": "..." }
    """
    permission_classes = [HasProfile]

    def post(self, request, pk):
        controller = self.mount(ApplyController(self.get_session(), self.get_job(pk)))
        controller.update_form(**self.form_data())
        if self.run(controller.submit):
            return self.render(controller, status.HTTP_201_CREATED)
        if controller.error == ALREADY_APPLIED:
            return self.render(controller, status.HTTP_409_CONFLICT)
        return self.render(controller, self.failure_status(controller))


# --- DASHBOARD ---


class DashboardView(ScreenAPIView):
    """Employer: my postings with applicants. Job seeker: my applications."""
    permission_classes = [HasProfile]

    def get(self, request):
        controller = self.mount(DashboardController(self.get_session()))
        return self.render(controller, self.load_status(controller))


class ApplicationStatusView(ScreenAPIView):
    """
    Review an application to one of my jobs.
    POST { "status": "reviewed" | "accepted" | "rejected" }
    """
    permission_classes = [HasProfile]

    def post(self, request, pk):
        serializer = ApplicationStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        controller = self.mount(DashboardController(self.get_session()))
        if self.run(controller.update_application_status, pk, serializer.validated_data['status']):
            return self.render(controller)
        return self.render(controller, self.failure_status(controller))
