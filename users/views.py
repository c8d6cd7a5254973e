import logging

from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from django.contrib.auth import get_user_model

from jobboard_core.exceptions import AuthError, DataAccessError
from jobboard_core.views import ScreenAPIView
from .controllers import ProfileController, ProfileSetupController
from .permissions import HasProfile
from .serializers import RegistrationSerializer, SignInSerializer, SignOutSerializer
from .session import SessionStore

User = get_user_model()

LOGGER = logging.getLogger(__name__)


class RegisterView(generics.CreateAPIView):
    queryset = User.objects.all()
    permission_classes = (permissions.AllowAny,)
    serializer_class = RegistrationSerializer


class SignInView(APIView):
    """
    Role-selected sign-in. Returns the JWT pair with the session snapshot;
    a new identity gets ``requires_profile_setup`` and no profile.
    """
    permission_classes = (permissions.AllowAny,)
    authentication_classes = ()

    def post(self, request):
        serializer = SignInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        session = SessionStore()
        try:
            tokens = session.sign_in(request=request, **serializer.validated_data)
        except AuthError as exc:
            return Response({"error": str(exc)}, status=status.HTTP_401_UNAUTHORIZED)
        return Response(dict(tokens, session=session.as_dict()))


class SignOutView(APIView):
    """
    Revokes the refresh token when it can; the client state is cleared either way.
    The access token is not checked, so an expired session can still sign out.
    """
    permission_classes = (permissions.AllowAny,)
    authentication_classes = ()

    def post(self, request):
        serializer = SignOutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        session = SessionStore()
        session.sign_out(serializer.validated_data.get('refresh'))
        return Response({"message": "Signed out.", "session": session.as_dict()})


class SessionView(APIView):
    permission_classes = (permissions.AllowAny,)

    def get(self, request):
        try:
            session = SessionStore.from_request(request)
        except DataAccessError as exc:
            LOGGER.warning("Session lookup failed: %s", exc)
            return Response(
                {"error": "The service is unavailable. Please try again."},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )
        return Response(session.as_dict())


class ProfileSetupView(ScreenAPIView):
    """
    The one screen open to an identity without a profile.
    POST { "user_type": "employer", "full_name": ..., "company_name": ... }
    """
    permission_classes = (permissions.IsAuthenticated,)

    def get(self, request):
        return self.render(self.mount(ProfileSetupController(self.get_session())))

    def post(self, request):
        controller = self.mount(ProfileSetupController(self.get_session()))
        controller.update_form(**self.form_data())
        if self.run(controller.submit):
            return self.render(controller, status.HTTP_201_CREATED)
        return self.render(controller, self.failure_status(controller))


class ProfileView(ScreenAPIView):
    """Get or edit the signed-in profile. The role and email are read-only."""
    permission_classes = (HasProfile,)

    def get(self, request):
        return self.render(self.mount(ProfileController(self.get_session())))

    def patch(self, request):
        controller = self.mount(ProfileController(self.get_session()))
        controller.start_editing()
        controller.update_form(**self.form_data())
        if self.run(controller.save):
            return self.render(controller)
        return self.render(controller, self.failure_status(controller))
