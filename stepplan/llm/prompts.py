from stepplan.tools.catalog import critical_rules, format_tools_compact, planner_tools


IMAGE_MARKER = "[Image attached]"
VIDEO_MARKER = "[Video attached]"
AUDIO_MARKER = "[Audio attached]"


PLANNER_OUTPUT = """OUTPUT (strict JSON only):

SINGLE: {"isMultiStep":false}

MULTI: {
  "isMultiStep":true,
  "steps":[
    {
      "stepNumber":1,
      "tool":"send_location",
      "action":"send location in Slovenia",
      "parameters":{"region":"Slovenia"}
    },
    {
      "stepNumber":2,
      "tool":"create_image",
      "action":"create image of lightning",
      "parameters":{"prompt":"lightning","provider":"gemini"}
    }
  ],
  "reasoning":"Has sequence word 'and then' indicating two sequential actions"
}"""


def build_planner_prompt(user_request: str) -> str:
    return f"""Analyze if this request needs multiple SEQUENTIAL steps.

REQUEST: "{user_request}"

RULES:
- SINGLE-STEP = ONE action only
- MULTI-STEP = 2+ DIFFERENT actions that must be executed in sequence

MEDIA CONTEXT:
- "{IMAGE_MARKER}" prefix = user attached an image
- "{VIDEO_MARKER}" prefix = user attached a video
- "{AUDIO_MARKER}" prefix = user attached audio
- NEVER use analyze_image or analyze_video unless media is attached or an explicit URL is in the request.
- Image attached + "animate"/"make video" -> SINGLE image_to_video (NOT create_video)
- Image attached + "edit" -> SINGLE edit_image
- Video attached + "edit" -> SINGLE edit_video
- Audio attached + no specific request -> SINGLE transcribe_audio
- No media + "create video with Veo 3" -> SINGLE create_video with provider parameter (NOT a retry)

COMMON SINGLE-STEP PATTERNS (NOT multi-step):
- "send image of X" / "image of X" -> SINGLE create_image (NOT search + analyze)
- "send location" -> SINGLE send_location
- "write a song" -> SINGLE text response (NO tool, just write the lyrics)
- "create a song" / "make music" -> SINGLE create_music
- "what did we say about X" / "who said Y" -> SINGLE get_chat_history
- "create group with picture" -> SINGLE create_group (the tool handles the image)

MULTI-STEP ONLY IF THE SEQUENCE IS EXPLICIT:
- Sequence words: "and then", "after that", "then"
- Multiple different verbs requiring different tools
- "send location and then an image" -> MULTI
- "create song and then video" -> MULTI

AVAILABLE TOOLS (exact names):
{format_tools_compact(planner_tools())}

CRITICAL RULES:
- Use EXACT tool names! "search_web" not "web_search"
{critical_rules()}

{PLANNER_OUTPUT}

CRITICAL:
- Each step MUST include: stepNumber, tool, action, parameters
- Extract parameters from the request (e.g., "in the Slovenia area" -> parameters: {{"region":"Slovenia"}})
- If no tool is needed (text response), use: {{"tool":null,"action":"tell a joke","parameters":{{}}}}

Return COMPLETE JSON only. NO markdown. NO "..."."""
