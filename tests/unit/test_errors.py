"""Tests for the core error hierarchy."""

from bigcommerce_mcp.core.errors import (
    BigCommerceMCPError,
    ConfigError,
    DiscoveryError,
    InvalidParamsError,
    ToolCallError,
    ToolExecutionError,
    UnknownToolError,
    UpstreamError,
)


class TestHierarchy:
    """All errors inherit from BigCommerceMCPError."""

    def test_startup_errors(self):
        assert isinstance(ConfigError("bad"), BigCommerceMCPError)
        assert isinstance(DiscoveryError("bad"), BigCommerceMCPError)

    def test_tool_call_subclasses(self):
        for err in (
            UnknownToolError("x"),
            InvalidParamsError("store_Hash"),
            ToolExecutionError("boom"),
        ):
            assert isinstance(err, ToolCallError)
            assert isinstance(err, BigCommerceMCPError)

    def test_upstream_is_not_tool_call_error(self):
        assert not isinstance(UpstreamError("x"), ToolCallError)


class TestCodesAndMessages:
    def test_unknown_tool(self):
        err = UnknownToolError("get_everything")
        assert err.code == -32601
        assert err.name == "get_everything"
        assert str(err) == "Unknown tool: get_everything"

    def test_invalid_params(self):
        err = InvalidParamsError("store_Hash")
        assert err.code == -32602
        assert err.parameter == "store_Hash"
        assert str(err) == "Missing required parameter: store_Hash"

    def test_execution_error(self):
        err = ToolExecutionError("connection reset")
        assert err.code == -32603
        assert str(err) == "API error: connection reset"

    def test_base_code_is_internal(self):
        assert ToolCallError.code == -32603

    def test_upstream_status(self):
        err = UpstreamError("HTTP 500: boom", status_code=500)
        assert err.status_code == 500
        assert str(err) == "HTTP 500: boom"
        assert UpstreamError("no status").status_code is None
