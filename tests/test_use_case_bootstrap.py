from unittest.mock import patch

from use_cases import bootstrap


def test_run_startup_order() -> None:
    order = []
    with patch("use_cases.bootstrap.auth.configure_storage", side_effect=lambda: order.append("configure_storage")), patch(
        "use_cases.bootstrap.auth.init_profile_db", side_effect=lambda: order.append("init_profile_db")
    ), patch(
        "use_cases.bootstrap.auth.init_audit_db", side_effect=lambda: order.append("init_audit_db")
    ), patch(
        "use_cases.bootstrap.auth.bootstrap_admin", side_effect=lambda: order.append("bootstrap_admin")
    ), patch(
        "use_cases.bootstrap.session_manager.init_session_state",
        side_effect=lambda: order.append("init_session_state"),
    ):
        result = bootstrap.run_startup()

    assert result.status == "CONTINUE"
    assert order == ["configure_storage", "init_profile_db", "init_audit_db", "bootstrap_admin", "init_session_state"]
    assert result.planned_steps == tuple(order)


@patch("use_cases.bootstrap.session_manager.init_session_state")
@patch("use_cases.bootstrap.auth.bootstrap_admin", return_value=False)
@patch("use_cases.bootstrap.auth.init_audit_db")
@patch("use_cases.bootstrap.auth.init_profile_db")
@patch("use_cases.bootstrap.auth.configure_storage")
def test_run_startup_continues_without_admin_email(
    _mock_configure,
    _mock_profiles,
    _mock_audit,
    mock_bootstrap_admin,
    mock_init_session,
) -> None:
    result = bootstrap.run_startup()

    assert result.status == "CONTINUE"
    mock_bootstrap_admin.assert_called_once()
    mock_init_session.assert_called_once()
