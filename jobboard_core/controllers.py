"""
Screen controller base classes.

A controller owns one screen's transient state. It reads through the data
access layer with ``sync_to_async`` so a screen can keep rendering (showing
``loading``) while the store answers. Two rules hold for every controller:

* after any successful write the screen's read is issued again, so the state
  always reflects the store (no local patching);
* once a controller is unmounted, responses that arrive later are dropped.

No request de-duplication is done: when two reads overlap, whichever answer
arrives last is the one that stays.
"""
import logging

from asgiref.sync import sync_to_async

from .exceptions import AuthError, JobBoardError

LOGGER = logging.getLogger(__name__)


class Controller:
    # Screens that need a signed-in identity unmount themselves on sign-out
    requires_identity = True

    def __init__(self, session):
        self.session = session
        self.mounted = False
        self.error = None
        self.denied = False
        self._unsubscribe = None

    def guard(self):
        """Raises AuthError when this screen may not render for the current session."""
        if self.session.requires_profile_setup:
            raise AuthError("Complete your profile before continuing.")

    async def mount(self):
        self.guard()
        self.mounted = True
        self.error = None
        self._unsubscribe = self.session.subscribe(self._on_session_changed)

    def unmount(self):
        self.mounted = False
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _deny(self, message):
        # Refused by an authorization rule; nothing is written
        self.denied = True
        self.error = message
        return False

    def _on_session_changed(self, sender, store, **kwargs):
        if self.requires_identity and store.identity is None and self.mounted:
            LOGGER.debug("Session ended; unmounting %s", type(self).__name__)
            self.unmount()

    def state(self):
        return {'error': self.error}


class ScreenController(Controller):
    """A screen backed by one read, re-issued after every write."""

    load_error_message = "Something went wrong while loading. Please try again."

    def __init__(self, session):
        super().__init__(session)
        self.loading = True

    def fetch(self):
        """Runs the screen's read (synchronously, off the event loop) and returns shaped data."""
        raise NotImplementedError

    def apply(self, data):
        raise NotImplementedError

    async def mount(self):
        await super().mount()
        await self.reload()

    async def reload(self):
        try:
            data = await sync_to_async(self.fetch)()
        except JobBoardError as exc:
            LOGGER.warning("%s load failed: %s", type(self).__name__, exc)
            if self.mounted:
                self.error = self.load_error_message
                self.loading = False
            return
        if not self.mounted:
            LOGGER.debug("Dropped response for unmounted %s", type(self).__name__)
            return
        self.apply(data)
        self.loading = False

    async def _mutate(self, write, *args, failure_message):
        """Single write attempt; on success invalidate and reload."""
        try:
            await sync_to_async(write)(*args)
        except JobBoardError as exc:
            LOGGER.warning("%s.%s failed: %s", type(self).__name__, getattr(write, '__name__', write), exc)
            if self.mounted:
                self.error = failure_message
            return False
        if not self.mounted:
            LOGGER.debug("Skipped reload for unmounted %s", type(self).__name__)
            return True
        self.error = None
        await self.reload()
        return True

    def state(self):
        return {'loading': self.loading, 'error': self.error}


class FormController(Controller):
    """A modal or form screen: holds field values and submits one write."""

    def __init__(self, session, initial=None):
        super().__init__(session)
        self.form = dict(initial or {})
        self.field_errors = {}
        self.submitting = False

    def update_form(self, **values):
        self.form.update(values)

    def _finish(self, error=None):
        """Applies the outcome of a submit unless the form was closed meanwhile."""
        if not self.mounted:
            LOGGER.debug("Dropped submit result for unmounted %s", type(self).__name__)
            return False
        self.submitting = False
        self.error = error
        return error is None

    def state(self):
        return {
            'form': dict(self.form),
            'error': self.error,
            'field_errors': self.field_errors,
            'submitting': self.submitting,
        }
