"""Auth state holder that gates access to the editor"""

from typing import Callable, List

from .models import AuthState, User

AuthListener = Callable[[AuthState], None]


class AuthSession:
    """Tracks the current user and notifies subscribers on every change"""

    def __init__(self, state: AuthState = None):
        self.state = state or AuthState()
        self._listeners: List[AuthListener] = []

    @property
    def user(self):
        return self.state.user

    @property
    def is_authenticated(self) -> bool:
        return self.state.is_authenticated

    def on_auth_state_changed(self, listener: AuthListener) -> Callable[[], None]:
        """Subscribe; the listener is called immediately with the current state."""
        self._listeners.append(listener)
        listener(self.state)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: AuthState) -> None:
        self.state = state
        for listener in list(self._listeners):
            listener(state)

    def sign_in(self, user: User) -> None:
        self._set_state(AuthState(user=user, is_loading=False))

    def sign_out(self) -> None:
        self._set_state(AuthState(user=None, is_loading=False))
