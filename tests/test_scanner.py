from __future__ import annotations

import pytest

from barcode_scanner.config import AppConfig
from barcode_scanner.scanner import BarcodeScanner
from barcode_scanner.state import PermissionStatus, ScanState


class FakeSession:
    def __init__(self, on_decoded):
        self.on_decoded = on_decoded
        self.stop_calls = 0

    @property
    def is_active(self) -> bool:
        return self.stop_calls == 0

    def stop(self) -> None:
        self.stop_calls += 1


class FakeBackend:
    def __init__(self):
        self.sessions = []

    def start(self, on_decoded):
        session = FakeSession(on_decoded)
        self.sessions.append(session)
        return session


class FakePermission:
    """Permission provider whose answer is held until ``resolve`` is called."""

    def __init__(self, status=PermissionStatus.GRANTED, answer=True, deferred=False):
        self._status = status
        self._answer = answer
        self._deferred = deferred
        self.requests = 0
        self.pending = None

    def status(self):
        return self._status

    def request(self, completion):
        self.requests += 1
        if self._deferred:
            self.pending = completion
            return
        self._status = PermissionStatus.GRANTED if self._answer else PermissionStatus.DENIED
        completion(self._answer)

    def resolve(self, granted: bool) -> None:
        self._status = PermissionStatus.GRANTED if granted else PermissionStatus.DENIED
        completion, self.pending = self.pending, None
        completion(granted)

    def grant_externally(self) -> None:
        self._status = PermissionStatus.GRANTED


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


def make_scanner(backend, permission) -> BarcodeScanner:
    return BarcodeScanner(backend, permission, AppConfig(access_denied_message="No camera"))


def test_start_with_granted_permission_publishes_session(backend):
    scanner = make_scanner(backend, FakePermission(PermissionStatus.GRANTED))
    published = []
    scanner.on_session_changed(published.append)

    scanner.start_scanning()

    assert scanner.capture_session is backend.sessions[0]
    assert published == [backend.sessions[0]]
    assert scanner.show_access_denied_alert is False
    assert scanner.state.scan_state is ScanState.SCANNING


def test_start_with_denied_permission_raises_alert(backend):
    scanner = make_scanner(backend, FakePermission(PermissionStatus.DENIED))
    messages = []
    scanner.on_access_denied(messages.append)

    scanner.start_scanning()

    assert scanner.show_access_denied_alert is True
    assert scanner.capture_session is None
    assert backend.sessions == []
    assert messages == ["No camera"]
    assert scanner.camera_access_denied_message == "No camera"
    assert scanner.state.scan_state is ScanState.DENIED


def test_start_requests_permission_when_not_determined(backend):
    permission = FakePermission(PermissionStatus.NOT_DETERMINED, answer=True)
    scanner = make_scanner(backend, permission)

    scanner.start_scanning()

    assert permission.requests == 1
    assert scanner.capture_session is not None


def test_refused_request_raises_alert(backend):
    permission = FakePermission(PermissionStatus.NOT_DETERMINED, answer=False)
    scanner = make_scanner(backend, permission)

    scanner.start_scanning()

    assert scanner.show_access_denied_alert is True
    assert scanner.capture_session is None


def test_start_is_idempotent(backend):
    scanner = make_scanner(backend, FakePermission())

    scanner.start_scanning()
    scanner.start_scanning()

    assert len(backend.sessions) == 1


def test_stop_twice_is_noop(backend):
    scanner = make_scanner(backend, FakePermission())
    published = []
    scanner.on_session_changed(published.append)
    scanner.start_scanning()
    session = scanner.capture_session

    scanner.stop_scanning()
    scanner.stop_scanning()

    assert session.stop_calls == 1
    assert scanner.capture_session is None
    assert published == [session, None]
    assert scanner.state.scan_state is ScanState.IDLE


def test_stop_without_session_is_noop(backend):
    scanner = make_scanner(backend, FakePermission())

    scanner.stop_scanning()

    assert scanner.capture_session is None
    assert scanner.state.scan_state is ScanState.IDLE


def test_decode_events_overwrite_previous_value(backend):
    scanner = make_scanner(backend, FakePermission())
    seen = []
    scanner.on_detect(seen.append)
    scanner.start_scanning()
    on_decoded = backend.sessions[0].on_decoded

    on_decoded("ABC123")
    assert scanner.detected_barcode == "ABC123"

    on_decoded("XYZ999")
    assert scanner.detected_barcode == "XYZ999"
    assert seen == ["ABC123", "XYZ999"]


def test_repeated_decodes_are_all_published(backend):
    scanner = make_scanner(backend, FakePermission())
    seen = []
    scanner.on_detect(seen.append)
    scanner.start_scanning()

    for _ in range(3):
        backend.sessions[0].on_decoded("SAME")

    assert seen == ["SAME", "SAME", "SAME"]


def test_empty_decode_is_ignored(backend):
    scanner = make_scanner(backend, FakePermission())
    scanner.start_scanning()
    backend.sessions[0].on_decoded("ABC123")

    backend.sessions[0].on_decoded("")

    assert scanner.detected_barcode == "ABC123"


def test_stop_keeps_detected_value(backend):
    scanner = make_scanner(backend, FakePermission())
    scanner.start_scanning()
    backend.sessions[0].on_decoded("ABC123")

    scanner.stop_scanning()
    scanner.start_scanning()

    assert scanner.detected_barcode == "ABC123"


def test_reset_clears_value_and_restarts(backend):
    scanner = make_scanner(backend, FakePermission())
    seen = []
    scanner.on_detect(seen.append)
    scanner.start_scanning()
    backend.sessions[0].on_decoded("ABC123")

    scanner.reset()

    assert scanner.detected_barcode is None
    assert seen == ["ABC123", None]
    assert backend.sessions[0].stop_calls == 1
    assert scanner.capture_session is backend.sessions[1]
    assert scanner.capture_session.is_active
    assert scanner.is_scanning


def test_reset_from_idle_starts_scanning(backend):
    scanner = make_scanner(backend, FakePermission())

    scanner.reset()

    assert scanner.detected_barcode is None
    assert scanner.capture_session is not None


def test_toggle_twice_restores_flag(backend):
    scanner = make_scanner(backend, FakePermission())
    original = scanner.is_scanning

    assert scanner.toggle_scanning() is True
    assert scanner.toggle_scanning() is False
    assert scanner.is_scanning == original


def test_toggle_with_denied_permission_stays_paused(backend):
    scanner = make_scanner(backend, FakePermission(PermissionStatus.DENIED))

    assert scanner.toggle_scanning() is False
    assert scanner.show_access_denied_alert is True


def test_stop_during_permission_request_discards_late_grant(backend):
    permission = FakePermission(PermissionStatus.NOT_DETERMINED, deferred=True)
    scanner = make_scanner(backend, permission)

    scanner.start_scanning()
    assert scanner.state.scan_state is ScanState.REQUESTING_PERMISSION
    assert scanner.is_scanning

    scanner.stop_scanning()
    permission.resolve(True)

    assert backend.sessions == []
    assert scanner.capture_session is None
    assert scanner.state.scan_state is ScanState.IDLE


def test_start_while_request_pending_does_not_request_again(backend):
    permission = FakePermission(PermissionStatus.NOT_DETERMINED, deferred=True)
    scanner = make_scanner(backend, permission)

    scanner.start_scanning()
    scanner.start_scanning()
    permission.resolve(True)

    assert permission.requests == 1
    assert len(backend.sessions) == 1


def test_external_grant_recovers_from_denied(backend):
    permission = FakePermission(PermissionStatus.DENIED)
    scanner = make_scanner(backend, permission)
    scanner.start_scanning()
    scanner.dismiss_access_denied_alert()

    permission.grant_externally()
    scanner.start_scanning()

    assert scanner.show_access_denied_alert is False
    assert scanner.capture_session is not None
    assert scanner.state.scan_state is ScanState.SCANNING


def test_dismiss_clears_alert_flag(backend):
    scanner = make_scanner(backend, FakePermission(PermissionStatus.DENIED))
    scanner.start_scanning()

    scanner.dismiss_access_denied_alert()

    assert scanner.show_access_denied_alert is False


def test_failing_callback_does_not_break_controller(backend):
    scanner = make_scanner(backend, FakePermission())

    def broken(_value):
        raise RuntimeError("boom")

    scanner.on_detect(broken)
    scanner.on_session_changed(broken)
    scanner.start_scanning()
    backend.sessions[0].on_decoded("ABC123")

    assert scanner.detected_barcode == "ABC123"
    assert scanner.capture_session is backend.sessions[0]


def test_callback_can_be_removed(backend):
    scanner = make_scanner(backend, FakePermission())
    seen = []
    scanner.on_detect(seen.append)
    scanner.on_detect(None)
    scanner.start_scanning()

    backend.sessions[0].on_decoded("ABC123")

    assert seen == []


def test_backend_errors_propagate(backend):
    class BrokenBackend:
        def start(self, on_decoded):
            raise RuntimeError("camera busy")

    scanner = make_scanner(BrokenBackend(), FakePermission())

    with pytest.raises(RuntimeError):
        scanner.start_scanning()

    assert scanner.capture_session is None
    assert scanner.show_access_denied_alert is False


def test_backend_error_during_permission_request_returns_to_idle(backend):
    class BrokenBackend:
        def start(self, on_decoded):
            raise RuntimeError("camera busy")

    permission = FakePermission(PermissionStatus.NOT_DETERMINED, answer=True)
    scanner = make_scanner(BrokenBackend(), permission)

    with pytest.raises(RuntimeError):
        scanner.start_scanning()

    assert scanner.state.scan_state is ScanState.IDLE
    assert scanner.is_scanning is False

    scanner._backend = backend
    scanner.start_scanning()

    assert scanner.capture_session is backend.sessions[0]
    assert scanner.state.scan_state is ScanState.SCANNING


def test_failing_callback_is_logged_once(backend, caplog):
    scanner = make_scanner(backend, FakePermission())

    def broken(_value):
        raise RuntimeError("boom")

    scanner.on_session_changed(broken)
    with caplog.at_level("ERROR", logger="barcode_scanner.scanner"):
        scanner.start_scanning()

    records = [r for r in caplog.records if r.name == "barcode_scanner.scanner"]
    assert [r.getMessage() for r in records] == ["Failed to run scanner callback"]
    assert records[0].exc_info is not None
