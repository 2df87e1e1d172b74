"""
Catalogue of the tools a plan step may name.
The planner only describes these to the model; resolving and running a
tool is the execution engine's job, so unknown names in a plan are kept.
"""


from typing import Dict, List, Optional

from pydantic import BaseModel


class ToolParam(BaseModel):
    type: str
    required: bool = False
    description: str = ""


class ToolSpec(BaseModel):
    name: str
    category: str
    description: str
    parameters: Dict[str, ToolParam] = {}
    critical: Optional[str] = None


TOOLS: Dict[str, ToolSpec] = {}

PLANNER_CATEGORIES = ("location", "creation", "audio", "search", "context", "analysis", "editing")


def register(spec: ToolSpec) -> ToolSpec:
    TOOLS[spec.name] = spec
    return spec


def get_tool(name: str) -> ToolSpec:
    if name not in TOOLS:
        raise KeyError(f"Unknown tool: {name}. Known: {list(TOOLS.keys())}")
    return TOOLS[name]


def tools_by_category(category: str) -> List[ToolSpec]:
    return [t for t in TOOLS.values() if t.category == category]


def user_facing_tools() -> List[ToolSpec]:
    return [t for t in TOOLS.values() if t.category != "meta"]


def planner_tools() -> List[ToolSpec]:
    return [t for t in TOOLS.values() if t.category in PLANNER_CATEGORIES]


def format_tools_for_prompt(tools: Optional[List[ToolSpec]] = None) -> str:
    lines = []
    for t in user_facing_tools() if tools is None else tools:
        params = ", ".join(
            f"{k}{'' if p.required else '?'}:{p.type}" for k, p in t.parameters.items()
        )
        lines.append(f"• {t.name}({params}) - {t.description}")
    return "\n".join(lines)


def format_tools_compact(tools: Optional[List[ToolSpec]] = None) -> str:
    return "\n".join(f"• {t.name} - {t.description}" for t in (user_facing_tools() if tools is None else tools))


def critical_rules() -> str:
    return "\n".join(f"• {t.name}: {t.critical}" for t in TOOLS.values() if t.critical)


def _p(type_: str, description: str, required: bool = False) -> ToolParam:
    return ToolParam(type=type_, required=required, description=description)


# location
register(ToolSpec(
    name="send_location",
    category="location",
    description="Send random location",
    parameters={"region": _p("string", "Specific region/city (optional)")},
))

# creation
register(ToolSpec(
    name="create_image",
    category="creation",
    description="Create NEW image with AI. Providers: gemini (default), openai, grok.",
    parameters={
        "prompt": _p("string", "Image description", True),
        "provider": _p("string", "gemini (default), openai, grok"),
    },
    critical='Use for ANY request to create/send/make an image. "send image of X" means CREATE, not search. '
             "A provider named in the request goes in the provider parameter, not retry_last_command.",
))
register(ToolSpec(
    name="create_video",
    category="creation",
    description="Create NEW video with AI. Providers: veo3, sora, sora-pro, kling (default).",
    parameters={
        "prompt": _p("string", "Video description", True),
        "provider": _p("string", "veo3, sora, sora-pro, kling (default)"),
    },
))
register(ToolSpec(
    name="image_to_video",
    category="creation",
    description="Animate an attached image into a video. Providers: veo3, sora, sora-pro, kling (default).",
    parameters={
        "image_url": _p("string", "Image URL", True),
        "prompt": _p("string", "Animation instructions"),
        "provider": _p("string", "veo3, sora, sora-pro, kling (default)"),
    },
    critical="Use ONLY when an image is attached and the user wants it animated. NOT for new videos.",
))
register(ToolSpec(
    name="create_music",
    category="creation",
    description="Create NEW song/music with melody. Not for 'write a song' (text only, no tool).",
    parameters={
        "prompt": _p("string", "Song description/lyrics", True),
        "make_video": _p("boolean", "Also create music video"),
    },
    critical="Use ONLY for creating NEW songs. For EXISTING songs use search_web.",
))
register(ToolSpec(
    name="create_poll",
    category="creation",
    description="Create chat poll",
    parameters={
        "topic": _p("string", "Poll topic", True),
        "num_options": _p("number", "Number of options (2-12)"),
        "with_rhyme": _p("boolean", "Make options rhyme"),
    },
))
register(ToolSpec(
    name="create_group",
    category="creation",
    description="Create chat group with participants (authorized users only)",
    parameters={
        "group_name": _p("string", "Group name", True),
        "participants_description": _p("string", "Who to add, e.g. 'all family members'"),
    },
))

# analysis
register(ToolSpec(
    name="analyze_image",
    category="analysis",
    description="Analyze/describe image",
    parameters={
        "image_url": _p("string", "Image URL to analyze", True),
        "question": _p("string", "Specific question about image"),
    },
))
register(ToolSpec(
    name="analyze_image_from_history",
    category="analysis",
    description="Analyze quoted/previous image from chat history",
    parameters={"question": _p("string", "Question about the image", True)},
))
register(ToolSpec(
    name="analyze_video",
    category="analysis",
    description="Analyze/describe video",
    parameters={
        "video_url": _p("string", "Video URL to analyze", True),
        "question": _p("string", "Specific question about video"),
    },
))

# editing
register(ToolSpec(
    name="edit_image",
    category="editing",
    description="Edit existing image. Services: openai (default), gemini.",
    parameters={
        "image_url": _p("string", "Image URL to edit", True),
        "edit_instruction": _p("string", "What to edit", True),
        "service": _p("string", "openai (default), gemini"),
    },
))
register(ToolSpec(
    name="edit_video",
    category="editing",
    description="Edit existing video",
    parameters={
        "video_url": _p("string", "Video URL to edit", True),
        "edit_instruction": _p("string", "What to edit", True),
    },
    critical="Use ONLY for editing existing videos.",
))

# audio
register(ToolSpec(
    name="text_to_speech",
    category="audio",
    description="Convert text to speech (NO translation)",
    parameters={
        "text": _p("string", "Text to speak", True),
        "voice": _p("string", "Voice style"),
    },
    critical='Use ONLY if the user explicitly asks for audio ("say", "voice", "read aloud").',
))
register(ToolSpec(
    name="translate_and_speak",
    category="audio",
    description="Translate text to target language AND convert to speech",
    parameters={
        "text": _p("string", "Text to translate and speak", True),
        "target_language": _p("string", "Target language", True),
    },
    critical="Use ONLY when the user states BOTH the text AND the target language. Never guess the language.",
))
register(ToolSpec(
    name="translate_text",
    category="translation",
    description="Translate text (NO speech)",
    parameters={
        "text": _p("string", "Text to translate", True),
        "target_language": _p("string", "Target language", True),
    },
))
register(ToolSpec(
    name="transcribe_audio",
    category="audio",
    description="Convert speech to text",
    parameters={"audio_url": _p("string", "Audio file URL", True)},
))
register(ToolSpec(
    name="voice_clone_and_speak",
    category="audio",
    description="Clone voice from audio and speak text",
    parameters={
        "reference_audio_url": _p("string", "Reference voice audio", True),
        "text_to_speak": _p("string", "Text to speak", True),
    },
))
register(ToolSpec(
    name="creative_audio_mix",
    category="audio",
    description="Mix/combine audio files creatively",
    parameters={
        "audio_urls": _p("array", "Audio files to mix", True),
        "instruction": _p("string", "How to mix", True),
    },
))

# search
register(ToolSpec(
    name="search_web",
    category="search",
    description="Search web for EXISTING content and links",
    parameters={"query": _p("string", "Search query", True)},
    critical="Use ONLY for finding links to EXISTING content. NOT for creating new images/videos.",
))
register(ToolSpec(
    name="search_google_drive",
    category="search",
    description="Search and retrieve documents, images and files from Google Drive",
    parameters={
        "query": _p("string", "Search query for files and content", True),
        "folder_id": _p("string", "Specific folder ID to search in"),
        "max_results": _p("number", "Maximum number of files to return (default: 5)"),
    },
    critical="Use for questions about stored drawings/documents/files, not get_chat_history.",
))

# context
register(ToolSpec(
    name="get_chat_history",
    category="context",
    description="Retrieve conversation history for questions about the chat or group",
    parameters={"limit": _p("number", "Number of messages (default: 20)")},
    critical="ALWAYS use for questions about what was said in the chat. Not for Drive documents.",
))
register(ToolSpec(
    name="get_long_term_memory",
    category="context",
    description="Access user preferences and conversation summaries",
    parameters={
        "include_summaries": _p("boolean", "Include summaries (default: true)"),
        "include_preferences": _p("boolean", "Include preferences (default: true)"),
    },
))
register(ToolSpec(
    name="save_user_preference",
    category="context",
    description="Save user preference for future reference",
    parameters={
        "preference_key": _p("string", "Preference key (e.g., favorite_color)", True),
        "preference_value": _p("string", "Preference value", True),
    },
))
register(ToolSpec(
    name="chat_summary",
    category="context",
    description="Summarize recent conversation",
    parameters={"num_messages": _p("number", "Messages to summarize (default: 20)")},
))

# meta
register(ToolSpec(
    name="retry_last_command",
    category="meta",
    description="Retry last command with optional modifications",
    parameters={"modifications": _p("string", "Changes to apply")},
))
register(ToolSpec(
    name="retry_with_different_provider",
    category="meta",
    description="Retry failed task with different AI provider",
    parameters={
        "original_tool": _p("string", "Tool that failed", True),
        "task_type": _p("string", "Task type (image/video/music)", True),
    },
))
