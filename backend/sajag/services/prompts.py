"""
Prompt templates and request builders for each action.

Each builder returns a ready-to-send OperationRequest:
- build_analysis_request: structured JSON (credibilityScore + breakdown)
- build_summary_request: plain text, one short paragraph
- build_fact_request: plain text, one "Did you know?" fact
"""

from sajag.config import Settings, get_settings
from sajag.models.schemas import ExpectedShape, OperationRequest

ANALYSIS_PROMPT = """You are a world-class misinformation expert and digital literacy educator. Your task is to analyze the provided text for factual accuracy, manipulative tactics, and credibility.

The user will provide a piece of text. You will respond with a structured JSON object.

The JSON object MUST have two properties:
1. 'credibilityScore': An integer from 0 to 100, where 100 is perfectly credible and 0 is completely false or misleading.
2. 'breakdown': A detailed, plain-language explanation (in English) of your analysis. Explain WHY the content is credible or not, pointing out specific elements like factual errors, emotional appeals, logical fallacies, or out-of-context information. The goal is to teach the user how to spot these issues themselves. Do not just state a score; justify it. The breakdown should be at least two paragraphs long.

Here is the text to analyze:
"{text}"
"""

SUMMARY_PROMPT = """Summarize the following text in a clear, concise paragraph of no more than 100 words.
Text to summarize:
"{text}"
"""

FACT_PROMPT = (
    "Provide a single, interesting, and easy-to-understand 'Did you know?' style fact "
    "about misinformation, media literacy, or cognitive biases that lead to believing "
    "false information."
)

# Property order matters to the model: score first, then the justification
ANALYSIS_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "credibilityScore": {"type": "NUMBER"},
        "breakdown": {"type": "STRING"},
    },
    "propertyOrdering": ["credibilityScore", "breakdown"],
}


def generate_content_path(model: str) -> str:
    return f"models/{model}:generateContent"


def _contents(prompt: str) -> list[dict]:
    return [{"parts": [{"text": prompt}]}]


def build_analysis_request(text: str, settings: Settings | None = None) -> OperationRequest:
    settings = settings or get_settings()

    body = {
        "contents": _contents(ANALYSIS_PROMPT.format(text=text)),
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": ANALYSIS_RESPONSE_SCHEMA,
        },
    }
    if settings.analyze_with_search:
        body["tools"] = [{"google_search": {}}]

    return OperationRequest(
        endpoint_path=generate_content_path(settings.gemini_model),
        body=body,
        expected_shape=ExpectedShape.STRUCTURED_JSON,
    )


def build_summary_request(text: str, settings: Settings | None = None) -> OperationRequest:
    settings = settings or get_settings()
    return OperationRequest(
        endpoint_path=generate_content_path(settings.gemini_model),
        body={
            "contents": _contents(SUMMARY_PROMPT.format(text=text)),
            "generationConfig": {"responseMimeType": "text/plain"},
        },
        expected_shape=ExpectedShape.PLAIN_TEXT,
    )


def build_fact_request(text: str = "", settings: Settings | None = None) -> OperationRequest:
    """The fact prompt is fixed; text is accepted and ignored so all builders share a signature."""
    settings = settings or get_settings()
    return OperationRequest(
        endpoint_path=generate_content_path(settings.gemini_model),
        body={
            "contents": _contents(FACT_PROMPT),
            "generationConfig": {"responseMimeType": "text/plain"},
        },
        expected_shape=ExpectedShape.PLAIN_TEXT,
    )
