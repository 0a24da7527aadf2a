"""Tests for background script execution."""
import pytest

from test_utils import make_mock_snow_client
from tools.scripting import PERMISSION_MESSAGE, ExecuteScriptParams, execute_script, script_preview
from utils.error_handler import ServiceNowStatusError, ServiceNowTransportError, ToolValidationError
from utils.validation import validate_params


@pytest.mark.asyncio
async def test_execute_script():
    client = make_mock_snow_client(execute_script={"output": "42"})
    script = "var gr = new GlideRecord('incident'); gr.query(); gs.info(gr.getRowCount());"

    res = await execute_script(client, ExecuteScriptParams(script=script, description="count incidents"))

    assert res == {
        "success": True,
        "result": {"output": "42"},
        "script_length": len(script),
        "description": "count incidents",
    }
    client.execute_script.assert_awaited_once_with(script)


@pytest.mark.asyncio
async def test_forbidden_names_required_roles():
    client = make_mock_snow_client()
    client.execute_script.side_effect = ServiceNowStatusError("Forbidden", status_code=403)

    with pytest.raises(ServiceNowStatusError) as exc_info:
        await execute_script(client, ExecuteScriptParams(script="gs.info(1)"))

    assert exc_info.value.message == PERMISSION_MESSAGE
    assert '"admin" or "script_debugger"' in exc_info.value.message


@pytest.mark.asyncio
async def test_other_errors_propagate_unchanged():
    client = make_mock_snow_client()
    error = ServiceNowTransportError("Network error: Could not connect.")
    client.execute_script.side_effect = error
    with pytest.raises(ServiceNowTransportError) as exc_info:
        await execute_script(client, ExecuteScriptParams(script="gs.info(1)"))
    assert exc_info.value is error


def test_script_length_bounds():
    with pytest.raises(ToolValidationError):
        validate_params("execute_script", ExecuteScriptParams, {"script": ""})
    with pytest.raises(ToolValidationError):
        validate_params("execute_script", ExecuteScriptParams, {"script": "x" * 100001})


def test_script_preview():
    assert script_preview("short") == "short"
    assert script_preview("x" * 250) == "x" * 200 + "..."
