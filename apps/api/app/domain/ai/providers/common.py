SYSTEM_PROMPT_TEMPLATE = (
    "System instructions (do not show to the user):\n"
    "{system_prompt}\n"
    "\n"
    "User question:\n"
    "{question}"
)


def normalize_system_prompt(value: str | None) -> str | None:
    text = (value or "").strip()
    return text or None


def compose_prompt(question: str, system_prompt: str | None) -> str:
    prompt = normalize_system_prompt(system_prompt)
    if prompt is None:
        return question
    return SYSTEM_PROMPT_TEMPLATE.format(system_prompt=prompt, question=question)
