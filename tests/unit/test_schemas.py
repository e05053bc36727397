from exam_monitor.schemas import ForceLogout, LivenessProbe, StatusRead


def test_force_logout_wire_shape():
    msg = ForceLogout()
    assert msg.model_dump() == {"type": "forceLogout", "reason": "Unresponsive"}


def test_force_logout_custom_reason():
    assert ForceLogout(reason="Replaced").reason == "Replaced"


def test_liveness_probe_wire_shape():
    assert LivenessProbe().model_dump() == {"type": "ping"}


def test_status_read_construction():
    status = StatusRead(
        live_connections=2,
        pending_visits=1,
        sweep_interval_ms=5000,
        visit_expiry_ms=2000,
        sweeper_running=True,
    )
    assert status.status == "ok"
    assert status.live_connections == 2
