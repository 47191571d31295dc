"""Chat Protocol factory so the analyst is discoverable through ASI:One.

Incoming text is handed to an async handler; the reply is sent back as a
single text message followed by an end-of-session marker.
"""

from uagents import Context, Protocol
from uagents_core.contrib.protocols.chat import (
    ChatAcknowledgement,
    ChatMessage,
    EndSessionContent,
    TextContent,
)


def extract_text(msg: ChatMessage) -> str:
    """Text of the first text block, or an empty string."""
    for item in msg.content:
        if isinstance(item, TextContent):
            return item.text
    return ""


def create_chat_protocol(agent_name: str, description: str, handler_fn=None) -> Protocol:
    """Build a Chat Protocol instance.

    Args:
        agent_name: Display name used in the fallback reply.
        description: What the agent does (used for ASI:One ranking).
        handler_fn: Optional ``async (ctx, sender, text) -> str``.
    """
    chat_proto = Protocol(name="chat", version="0.3.0")

    @chat_proto.on_message(ChatMessage)
    async def handle_chat(ctx: Context, sender: str, msg: ChatMessage):
        await ctx.send(sender, ChatAcknowledgement(acknowledged_msg_id=msg.msg_id))

        text = extract_text(msg)
        if handler_fn:
            response_text = await handler_fn(ctx, sender, text)
        else:
            response_text = f"I'm {agent_name}. {description}"

        await ctx.send(
            sender,
            ChatMessage(msg_id=ctx.session, content=[TextContent(text=response_text)]),
        )
        await ctx.send(
            sender,
            ChatMessage(msg_id=ctx.session, content=[EndSessionContent()]),
        )

    return chat_proto
