"""Tests for the page helpers that do not need a running Streamlit script."""

import cv2
import pytest

from core.capture import MediaCaptureAdapter
from core.exception import FileTooLargeError, MissingCredentialError
from core.session import IdentificationSession, Phase
from tools.ui_tools import needs_key_prompt, run_guarded


@pytest.fixture
def session():
    return IdentificationSession()


class TestRunGuarded:
    def test_returns_callback_result(self, session):
        assert run_guarded(session, lambda a, b: a + b, 2, 3) == 5
        assert session.error is None

    def test_encoder_failure_during_capture_is_shown(self, session, opener, monkeypatch):
        adapter = MediaCaptureAdapter(opener=opener)
        session.activate_camera(adapter)

        def broken_capture(_adapter):
            raise cv2.error("OpenCV(4.10.0) error: (-215:Assertion failed) !_src.empty()")

        monkeypatch.setattr(session, "capture_photo", broken_capture)
        assert run_guarded(session, session.capture_photo, adapter) is None
        assert session.phase is Phase.ERROR_SHOWN
        assert session.error == "Unexpected error (error). Please try again."


class TestNeedsKeyPrompt:
    def test_first_visit_prompts_once(self):
        state = {}
        assert needs_key_prompt(state, has_credential=False, failure=None)
        assert not needs_key_prompt(state, has_credential=False, failure=None)

    def test_no_prompt_when_key_present(self):
        assert not needs_key_prompt({}, has_credential=True, failure=None)

    def test_blocked_selection_prompts_once_per_failure(self):
        state = {"api_key_prompted": True}
        blocked = MissingCredentialError()
        assert needs_key_prompt(state, has_credential=False, failure=blocked)
        # Dismissed dialog: later reruns keep the same failure and stay closed
        assert not needs_key_prompt(state, has_credential=False, failure=blocked)
        assert not needs_key_prompt(state, has_credential=False, failure=blocked)
        # A fresh blocked upload asks again
        assert needs_key_prompt(state, has_credential=False, failure=MissingCredentialError())

    def test_other_failures_do_not_prompt(self):
        state = {"api_key_prompted": True}
        assert not needs_key_prompt(state, has_credential=True, failure=FileTooLargeError())
