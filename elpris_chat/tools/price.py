"""
The electricity price tool as the model sees it.

The model calls ``get_el_price``; the orchestrator forwards recognized calls
to the MCP server, which registers the same capability under its own name
(``ToolSettings.mcp_tool_name``).
"""

GET_EL_PRICE = "get_el_price"

PRICE_AREAS = ("SE1", "SE2", "SE3", "SE4")

# LiteLLM uses the OpenAI tool format and translates it per provider.
GET_EL_PRICE_DECLARATION = {
    "type": "function",
    "function": {
        "name": GET_EL_PRICE,
        "description": (
            "Hämta elpris för datum (YYYY-MM-DD) och område (SE1–SE4). "
            "Om datum saknas: använd dagens datum i Europe/Stockholm."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "date": {"type": "string", "description": "YYYY-MM-DD"},
                "area": {"type": "string", "enum": list(PRICE_AREAS)},
            },
            "required": ["area"],
        },
    },
}
