import asyncio

from chat_bridge.config import Settings
from chat_bridge.errors import ChatBridgeError
from chat_bridge.providers import get_provider
from chat_bridge.tools import ChatTool, ToolRegistry


async def main() -> None:
    settings = Settings(openai_api_key="DUMMY", anthropic_api_key="DUMMY", google_ai_api_key="DUMMY")
    registry = ToolRegistry(
        ChatTool(get_provider(name, settings)) for name in ("openai", "anthropic", "gemini")
    )

    for tool in registry.list_tools():
        print(tool["name"], sorted(tool["inputSchema"]["properties"]))

    # Demonstrate validation happening before any network call
    try:
        await registry.handle_tool_call(
            "chat_with_claude",
            {"messages": [{"role": "user", "content": "hi"}], "temperature": 5},
        )
    except ChatBridgeError as e:
        print("Expected error:", type(e).__name__, e.code, e)
    finally:
        await registry.aclose()


if __name__ == "__main__":
    asyncio.run(main())
