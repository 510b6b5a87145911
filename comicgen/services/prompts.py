DEFAULT_PROMPTS = {
    "summary": (
        "You are a comic book artist and storyteller. Break down the given article into ${numParts} parts "
        "and create both a summary and an image generation prompt for each part. Ensure that each image "
        "generation prompt has enough information about the general setting of the story, ensuring "
        "consistency across the images. Decide for a style and incorporate in each image generation prompt."
    ),
    "image": "Create a single comic panel style image: ${prompt}",
}

# Appended to every summary prompt, overrides included, so the reply stays parseable
RESPONSE_FORMAT = (
    'Respond with JSON in this format: '
    '{ "title": "string", "parts": [{ "summary": "string", "prompt": "string" }] }'
)


def render_summary_prompt(part_count: int, template: str | None = None) -> str:
    text = (template or DEFAULT_PROMPTS["summary"]).replace("${numParts}", str(part_count))
    return f"{text}\n\n{RESPONSE_FORMAT}"


def render_image_prompt(prompt: str, template: str | None = None) -> str:
    template = template or DEFAULT_PROMPTS["image"]
    if "${prompt}" in template:
        return template.replace("${prompt}", prompt)
    return f"{template.rstrip()} {prompt}"
