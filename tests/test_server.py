"""Tests for MCP server assembly."""

from library_circulation import server


def test_build_server(test_config):
    mcp = server.build_server(test_config)
    assert mcp.name == "test-library-circulation"


async def test_tools_and_resources_are_registered(test_config):
    mcp = server.build_server(test_config)

    tools = await mcp.get_tools()
    assert set(tools) == {"borrow_book", "return_book", "extend_due_date", "refresh_overdue_status"}

    resources = await mcp.get_resources()
    assert "library://circulation/current" in resources
    assert "library://circulation/dashboard" in resources

    templates = await mcp.get_resource_templates()
    assert "library://circulation/records/{record_id}" in templates
    assert "library://users/{user_id}/borrow-history" in templates
    assert "library://users/{user_id}/current-loans" in templates


def test_sweeper_disabled(test_config):
    assert server.start_sweeper(test_config) is None


def test_sweeper_started(test_config, services):
    config = test_config.model_copy(update={"overdue_sweep_interval_seconds": 3600})
    sweeper = server.start_sweeper(config)
    try:
        assert sweeper.is_running
        assert sweeper.engine is services[0]
    finally:
        sweeper.stop()
