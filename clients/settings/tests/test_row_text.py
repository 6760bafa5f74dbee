from settings_app import strings
from settings_app.async_result import LOADING, Success
from settings_app.discovery_controller import build_rows
from settings_app.discovery_state import DiscoverySettingsState
from settings_app.pid_state import IdentifierKind, PidState, SharedState
from settings_app.row_text import SPINNER, format_row, format_rows, loading_label
from settings_app.rows import LoadingRow


def test_loading_label_hides_missing_text():
    assert loading_label(LoadingRow(id="x")) == SPINNER
    assert loading_label(LoadingRow(id="x", loading_text="Fetching")) == f"{SPINNER} Fetching"


def test_format_rows_renders_switch_marks_and_pending_hint():
    state = DiscoverySettingsState(
        identity_server_url="https://is.example.org",
        email_list=Success(
            (
                PidState("a@b.com", IdentifierKind.EMAIL, SharedState.NOT_SHARED),
                PidState("c@d.com", IdentifierKind.EMAIL, SharedState.SHARED),
                PidState("p@q.com", IdentifierKind.EMAIL, SharedState.PENDING),
                PidState("u@v.com", IdentifierKind.EMAIL, SharedState.UNKNOWN),
            )
        ),
        phone_number_list=LOADING,
    )
    lines = format_rows(build_rows(state))
    assert lines[0] == f"== {strings.IDENTITY_SERVER} =="
    assert "  a@b.com  [ ]" in lines
    assert "  c@d.com  [x]" in lines
    assert f"  p@q.com  ({strings.PENDING})" in lines
    assert f"    {strings.CONFIRM_PENDING}" in lines
    assert "  u@v.com  [?]" in lines
    assert f"  {SPINNER}" in lines
    assert "  ! Disconnect" in lines


def test_format_row_of_unknown_object_is_blank():
    assert format_row(object()) == ""
