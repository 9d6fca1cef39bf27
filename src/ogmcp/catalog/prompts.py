# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Guided workflows for the image tools, exposed as MCP prompts."""

from __future__ import annotations

from collections.abc import Mapping

from .. import types
from ..prompt import prompt
from ..resource_template import UUID_PATTERN


CREATE_BRANDED_DIAGRAM = "create-branded-diagram"
ITERATE_AND_REFINE = "iterate-and-refine"
CREATE_ASSET_SET = "create-asset-set"
QUICK_ICON = "quick-icon"

ASSET_KINDS = {
    "icons": "icon",
    "social-cards": "social-card",
    "diagrams": "diagram",
    "illustrations": "illustration",
}

ICON_STYLES = {
    "outline": "line-art style with consistent 2px stroke weight, no fills",
    "filled": "solid filled shapes, clean and simple",
    "duotone": "two-tone design with primary color and lighter accent",
    "3d": "subtle 3D effect with soft shadows and gradients",
}

ASSET_SET_TIPS = {
    "icons": """- Use `transparent: true` for all icons
- Keep complexity consistent (same level of detail)
- Use the same line weights and corner radius
- Consider a consistent canvas size (e.g., 512x512)""",
    "social-cards": """- Maintain consistent text placement zones
- Use the same typography style
- Keep brand logo in the same position
- Standard sizes: 1200x630 (OG), 1200x675 (Twitter)""",
    "diagrams": """- Use the same diagram syntax (all Mermaid or all D2)
- Consistent node shapes and colors
- Same arrow styles and line weights
- Matching background treatment""",
    "illustrations": """- Same art style throughout
- Consistent character proportions (if applicable)
- Matching color saturation and contrast
- Similar level of detail and complexity""",
}


def _user(text: str) -> dict[str, object]:
    return {"role": "user", "content": text}


@prompt(
    CREATE_BRANDED_DIAGRAM,
    description="Guided workflow for creating professional diagrams that match your brand identity",
    arguments=[
        {
            "name": "diagramType",
            "description": "Type of diagram: flowchart, sequence, architecture, er-diagram, state, or other",
            "required": True,
        },
        {"name": "description", "description": "Brief description of what the diagram should show", "required": True},
    ],
)
def create_branded_diagram(args: Mapping[str, str]):
    diagram_type = args.get("diagramType") or "flowchart"
    description = args.get("description") or "a diagram"
    return [
        _user(
            f"""I need to create a {diagram_type} diagram: {description}

Please help me create this diagram by following these steps:

## Step 1: Gather Brand Context
Before generating, I need to provide:
- **Brand colors**: What are my primary and secondary brand colors? (hex codes like #0033A0)
- **Style preferences**: Modern, minimalist, corporate, playful, technical?
- **Project context**: What is this diagram for? (documentation, presentation, website)

## Step 2: Define the Diagram Structure
Help me outline the diagram structure:
- What are the main components/nodes?
- What are the relationships/flows between them?
- Should we use Mermaid or D2 syntax?

## Step 3: Choose Output Style
- **draft**: Quick preview (fastest, minimal styling)
- **standard**: AI-enhanced with brand colors (recommended for most cases)
- **premium**: Full AI polish - stunning professional artwork (best for hero images, may need iteration)

## Step 4: Generate
Once we have the context, generate the diagram using the `generateImage` tool with:
- kind: "diagram"
- brandColors: [my colors]
- stylePreferences: [my style]
- projectContext: [my context]
- outputStyle: [chosen style]

## Tips for Best Results
- For complex diagrams, start with 'standard' output style
- If the result has clipping or duplicates, regenerate with explicit instructions
- Use the iterateImage tool for refinements rather than regenerating from scratch"""
        )
    ]


@prompt(
    ITERATE_AND_REFINE,
    description="Best practices for iterating on generated images to achieve the perfect result",
    arguments=[
        {"name": "sessionId", "description": "The session UUID containing the image", "required": True},
        {"name": "assetId", "description": "The asset UUID to iterate on", "required": True},
        {"name": "issue", "description": "What issue are you trying to fix?", "required": False},
    ],
)
def iterate_and_refine(args: Mapping[str, str]):
    session_id = args.get("sessionId") or "[sessionId]"
    asset_id = args.get("assetId") or "[assetId]"
    issue = f"\n\n**Current issue to address**: {args['issue']}" if args.get("issue") else ""

    messages: list[object] = [
        _user(
            f"""I want to iterate on asset {asset_id} in session {session_id}.{issue}

## First: Inspect the Asset
Use `inspectImageSession(sessionId={session_id})` to review:
- What toolchain was used (mermaid, d2, openai, gemini)?
- What was the original prompt?
- What metadata is stored (diagram source, colors used)?

## Common Issues and Solutions

### Clipped Edges / Elements Cut Off
- Include padding instructions: "ensure 20px padding on all edges"
- For diagrams: regenerate with explicit Mermaid/D2 source
- Try 'standard' output style instead of 'premium'

### Duplicate Elements
- This happens with 'premium' GPT-Image polish
- Explicitly state: "no duplicate boxes or labels"
- Consider using 'standard' for accuracy

### Wrong Colors / Style
- Use `iterateImage` with specific color instructions: "change primary color to #0033A0"
- Reference the original brandColors if they were provided

### Text Readability Issues
- Request "high contrast text"
- Specify "minimum 14px font size"
- Try 'gemini-pro' model for better text rendering

### Layout Problems
- For diagrams: provide the exact Mermaid/D2 source to preserve structure
- Add direction hints: "left to right flow", "top to bottom hierarchy"

## Using the Iterate Tool
```
iterateImage({{
  sessionId: "{session_id}",
  assetId: "{asset_id}",
  prompt: "Specific changes you want..."
}})
```

## When to Regenerate Instead
- If the fundamental structure is wrong
- If you need a completely different style
- If iteration attempts aren't converging

Start by inspecting the asset, then tell me what you'd like to change."""
        )
    ]

    if UUID_PATTERN.fullmatch(session_id) and UUID_PATTERN.fullmatch(asset_id):
        messages.append(
            {
                "role": "user",
                "content": types.ResourceLink(
                    type="resource_link",
                    uri=f"asset://{session_id}/{asset_id}",
                    name=f"Asset {asset_id}",
                    mimeType="image/png",
                ),
            }
        )
    return messages


@prompt(
    CREATE_ASSET_SET,
    description="Create a set of visually consistent images (icons, social cards, diagrams, illustrations)",
    arguments=[
        {
            "name": "assetType",
            "description": "Type of assets: icons, social-cards, diagrams, or illustrations",
            "required": True,
        },
        {"name": "count", "description": "How many assets in the set (2-10)", "required": True},
    ],
)
def create_asset_set(args: Mapping[str, str]):
    asset_type = args.get("assetType") or "icons"
    try:
        count = int(args.get("count") or 3) or 3
    except ValueError:
        count = 3
    kind = ASSET_KINDS.get(asset_type, "illustration")
    tips = ASSET_SET_TIPS.get(asset_type, "")

    return [
        _user(
            f"""I need to create a set of {count} consistent {asset_type}.

## Creating Visually Consistent Assets

### Step 1: Establish the Style Guide
Before creating any assets, define:
- **Color palette**: Primary, secondary, accent colors (hex codes)
- **Style**: Modern, flat, 3D, hand-drawn, technical, etc.
- **Background**: Transparent, solid color, gradient?
- **Dimensions**: Same size for all? Specific aspect ratios?

### Step 2: Create the First Asset
Generate the first asset with full context:
```
generateImage({{
  prompt: "[first asset description]",
  kind: "{kind}",
  brandColors: ["#primary", "#secondary"],
  stylePreferences: "[your style]",
  projectContext: "Part of a {count}-asset set for [purpose]",
  outputStyle: "standard"
}})
```

### Step 3: Use First Asset as Reference
Once you're happy with the first asset, use its ID as a reference for consistency:
```
generateImage({{
  prompt: "[second asset description]",
  kind: "{kind}",
  referenceAssetId: "[first asset ID]",
  brandColors: ["#primary", "#secondary"],
  stylePreferences: "[same style]",
  outputStyle: "standard"
}})
```

### Step 4: Iterate for Consistency
If an asset doesn't match the set:
- Use `iterateImage` to adjust colors/style
- Reference the prompt: "match the style of asset [ID]"
- Keep the same brandColors and stylePreferences

### Tips for {asset_type}
{tips}

What {asset_type} do you need to create? Let's start with defining your style guide."""
        )
    ]


@prompt(
    QUICK_ICON,
    description="Quickly generate a simple icon with sensible defaults",
    arguments=[
        {
            "name": "iconDescription",
            "description": "What the icon should represent (e.g., 'settings gear', 'user profile')",
            "required": True,
        },
        {
            "name": "style",
            "description": "Icon style: outline, filled, duotone, or 3d (defaults to filled)",
            "required": False,
        },
    ],
)
def quick_icon(args: Mapping[str, str]):
    description = args.get("iconDescription") or "an icon"
    style = args.get("style") or "filled"
    style_desc = ICON_STYLES.get(style, ICON_STYLES["filled"])
    return [
        _user(
            f"""Generate a {style} icon: {description}

Use these settings for best results:
```
generateImage({{
  prompt: "{description} icon, {style_desc}, centered on canvas, professional quality",
  kind: "icon",
  transparent: true,
  quality: "high",
  stylePreferences: "{style} icon style, clean vector aesthetic, suitable for UI",
  outputStyle: "standard"
}})
```

This will create a transparent PNG icon ready for use in your application."""
        )
    ]


PROMPTS = (create_branded_diagram, iterate_and_refine, create_asset_set, quick_icon)


__all__ = [
    "ASSET_KINDS",
    "CREATE_ASSET_SET",
    "CREATE_BRANDED_DIAGRAM",
    "ICON_STYLES",
    "ITERATE_AND_REFINE",
    "PROMPTS",
    "QUICK_ICON",
    "create_asset_set",
    "create_branded_diagram",
    "iterate_and_refine",
    "quick_icon",
]
