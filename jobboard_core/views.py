import logging

from asgiref.sync import async_to_sync
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from users.session import SessionStore
from .exceptions import AuthError, DataAccessError

LOGGER = logging.getLogger(__name__)


class ScreenAPIView(APIView):
    """
    Serves one screen controller per request: initialize the session store
    from the request identity, mount the controller, run the action, render
    the controller state.
    """

    def get_session(self):
        if not hasattr(self, '_session'):
            self._session = SessionStore.from_request(self.request)
        return self._session

    def mount(self, controller):
        async_to_sync(controller.mount)()
        return controller

    def run(self, action, *args):
        return async_to_sync(action)(*args)

    def render(self, controller, status_code=status.HTTP_200_OK):
        return Response(controller.state(), status=status_code)

    def failure_status(self, controller):
        if controller.denied:
            return status.HTTP_403_FORBIDDEN
        return status.HTTP_400_BAD_REQUEST

    def load_status(self, controller):
        # A screen whose read failed still renders, with its error message
        if controller.error:
            return status.HTTP_503_SERVICE_UNAVAILABLE
        return status.HTTP_200_OK

    def form_data(self):
        data = self.request.data
        return data.dict() if hasattr(data, 'dict') else dict(data)

    def handle_exception(self, exc):
        # Screen guards and session initialization fail with our own errors
        if isinstance(exc, AuthError):
            return Response({"error": str(exc)}, status=status.HTTP_403_FORBIDDEN)
        if isinstance(exc, DataAccessError):
            LOGGER.warning("%s could not reach the store: %s", type(self).__name__, exc)
            return Response(
                {"error": "The service is unavailable. Please try again."},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )
        return super().handle_exception(exc)
