from typing import Callable


GREETING_ANSWER = (
    "Hello! I'm a demo AI assistant for the Rust learning project.\n\n"
    "I'm running in mock mode, but I can answer questions about:\n"
    "- Rust programming language\n"
    "- Rocket web framework\n"
    "- Async programming\n"
    "- REST API and JSON\n"
    "- Testing\n"
    "- Error handling\n\n"
    "Try asking me about any of these topics! For full AI capabilities, "
    "configure the AI provider connection."
)

ROCKET_ANSWER = (
    "Rocket is a web framework for Rust that makes building fast and secure "
    "web applications simple and enjoyable. Key features:\n"
    "- Compile-time type safety\n"
    "- Convenient routing macros (#[get], #[post], etc.)\n"
    "- Automatic JSON deserialization\n"
    "- Built-in testing support\n"
    "- Flexible middleware system (fairings)\n"
    "Rocket is ideal for building REST APIs and web services."
)

TESTING_ANSWER = (
    "Testing in Rust is a built-in language feature. Types of tests:\n"
    "- Unit tests (#[test]) - test individual functions\n"
    "- Integration tests (tests/ folder) - test component interactions\n"
    "- Doc tests - examples in documentation that are automatically verified\n"
    "Rocket provides convenient tools for testing web apps via "
    "rocket::local::blocking::Client. Run with: cargo test"
)

ERROR_HANDLING_ANSWER = (
    "Error handling in Rust is based on Result<T, E> and Option<T> types:\n"
    "- Result - for operations that may fail\n"
    "- Option - for values that may be absent\n"
    "- ? operator - for convenient error propagation\n"
    "- thiserror - library for creating custom error types\n"
    "This approach forces explicit error handling and eliminates many runtime issues."
)

SERIALIZATION_ANSWER = (
    "Serde is a powerful framework for serializing and deserializing data in Rust. "
    "It allows you to:\n"
    "- Automatically convert JSON to Rust structs\n"
    "- Convert structs back to JSON\n"
    "- Work with other formats (TOML, YAML, MessagePack)\n"
    "- Use derive macros for automatic code generation\n"
    "Example: #[derive(Serialize, Deserialize)] makes a struct JSON-compatible."
)

ASYNC_ANSWER = (
    "Async programming in Rust allows efficient handling of many tasks "
    "simultaneously without creating many threads. Key concepts:\n"
    "- async/await - syntax for async functions\n"
    "- Future - trait for async computations\n"
    "- Tokio - popular async runtime\n"
    "- Async trait - for async methods in traits\n"
    "Especially useful for web servers, network apps, and I/O operations."
)

REST_API_ANSWER = (
    "REST API (Representational State Transfer) is an architectural style for "
    "building web services. Main principles:\n"
    "- GET - retrieve data\n"
    "- POST - create new resources\n"
    "- PUT/PATCH - update existing resources\n"
    "- DELETE - remove resources\n"
    "With Rust and Rocket, building APIs is convenient thanks to type safety "
    "and automatic JSON handling via serde."
)

HOW_IT_WORKS_ANSWER = (
    "This app is a demo project showing how to put a question-answering "
    "service behind an HTTP API. Architecture:\n"
    "- FastAPI - accepts HTTP requests (app/main.py)\n"
    "- Routes - validate and answer requests (app/api/public/)\n"
    "- AI services - the provider contract, mock and live providers (app/domain/ai/)\n"
    "- Error policy - maps service failures to HTTP errors (app/services/)\n"
    "- Config - settings from env, .env and config.toml (app/core/config.py)\n\n"
    "The service can run in two modes: with a real AI provider or with mocks (current)."
)

RUST_ANSWER = (
    "Rust is a systems programming language focused on safety, speed, and concurrency. "
    "It was developed by Mozilla Research and first released in 2010. "
    "Rust guarantees memory safety without using a garbage collector through its "
    "ownership and borrowing system. This makes Rust ideal for systems programming, "
    "web servers, embedded systems, and high-performance applications."
)

FALLBACK_ANSWER = (
    "This is a demo response from the mock service.\n\n"
    "I can help with questions about:\n"
    "- Rust and its features\n"
    "- Rocket web framework\n"
    "- Async programming\n"
    "- REST API\n"
    "- Testing\n\n"
    "Try asking: 'What is Rust?' or 'How does Rocket work?'\n\n"
    "For real AI responses, set the AI_API_KEY environment variable "
    "and AI_ENABLED=true (or ai_enabled = true in config.toml)."
)

_GREETING_PREFIXES = ("hi ", "hi!", "hi,")


def is_greeting(text: str) -> bool:
    # "hi" only counts as a whole leading word; "this" must not match.
    return text == "hi" or "hello" in text or text.startswith(_GREETING_PREFIXES)


def _contains_any(*keywords: str) -> Callable[[str], bool]:
    return lambda text: any(keyword in text for keyword in keywords)


def _asks_how_it_works(text: str) -> bool:
    return "how" in text and "work" in text


# First match wins. "rust" is checked last because questions about Rocket,
# testing or async usually mention Rust too.
TOPIC_RULES: tuple[tuple[Callable[[str], bool], str], ...] = (
    (is_greeting, GREETING_ANSWER),
    (_contains_any("rocket"), ROCKET_ANSWER),
    (_contains_any("test"), TESTING_ANSWER),
    (_contains_any("error"), ERROR_HANDLING_ANSWER),
    (_contains_any("serde", "json"), SERIALIZATION_ANSWER),
    (_contains_any("async"), ASYNC_ANSWER),
    (_contains_any("api"), REST_API_ANSWER),
    (_asks_how_it_works, HOW_IT_WORKS_ANSWER),
    (_contains_any("rust"), RUST_ANSWER),
)


def answer_for(question: str) -> str:
    text = question.lower()
    for matches, answer in TOPIC_RULES:
        if matches(text):
            return answer
    return FALLBACK_ANSWER


class MockAIService:
    """Offline keyword responder used when no live provider is configured."""

    async def ask(self, question: str) -> str:
        return answer_for(question)

    def name(self) -> str:
        return "Mock AI Service"

    def system_prompt_applied(self) -> bool:
        return False
