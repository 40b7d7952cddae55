import json

from services.response_extractor import (
    ACTION_FALLBACK_MESSAGE,
    extract_response,
    find_json_candidate,
    strip_code_fence,
)


ACTION_REPLY = {
    "message": "Listo, actualicé tu cargo.",
    "action": {
        "type": "update",
        "section": "experience",
        "id": "e1",
        "data": {"role": "Senior Dev"},
    },
}


class TestStructuredReplies:
    def test_bare_json(self):
        result = extract_response(json.dumps(ACTION_REPLY))
        assert result.message == ACTION_REPLY["message"]
        assert result.action == ACTION_REPLY["action"]

    def test_json_fence(self):
        text = "```json\n" + json.dumps(ACTION_REPLY, indent=2) + "\n```"
        result = extract_response(text)
        assert result.message == ACTION_REPLY["message"]
        assert result.action == ACTION_REPLY["action"]

    def test_untagged_fence(self):
        text = "```\n" + json.dumps(ACTION_REPLY) + "\n```"
        assert extract_response(text).action == ACTION_REPLY["action"]

    def test_prose_before_json_is_discarded(self):
        text = "Sure, here: " + json.dumps(ACTION_REPLY)
        result = extract_response(text)
        assert result.message == ACTION_REPLY["message"]
        assert "Sure" not in result.message
        assert result.action == ACTION_REPLY["action"]

    def test_prose_around_fence(self):
        text = "Claro:\n```json\n" + json.dumps(ACTION_REPLY) + "\n```\nAvísame si necesitas algo más."
        result = extract_response(text)
        assert result.action == ACTION_REPLY["action"]

    def test_braces_inside_string_values(self):
        reply = {
            "message": "Agregué el proyecto {beta}",
            "action": {
                "type": "create",
                "section": "projects",
                "data": {"name": "API", "description": "Usa {placeholders} en plantillas"},
            },
        }
        result = extract_response("Aquí va: " + json.dumps(reply, ensure_ascii=False))
        assert result.message == "Agregué el proyecto {beta}"
        assert result.action["data"]["description"] == "Usa {placeholders} en plantillas"

    def test_missing_message_uses_fallback(self):
        text = json.dumps({"action": ACTION_REPLY["action"]})
        result = extract_response(text)
        assert result.message == ACTION_FALLBACK_MESSAGE
        assert result.action == ACTION_REPLY["action"]

    def test_message_only_envelope(self):
        result = extract_response('{"message": "Nada que cambiar."}')
        assert result.message == "Nada que cambiar."
        assert result.action is None

    def test_non_object_action_dropped(self):
        result = extract_response('{"message": "ok", "action": "delete everything"}')
        assert result.message == "ok"
        assert result.action is None


class TestAdvisoryReplies:
    def test_plain_greeting(self):
        result = extract_response("Hola, ¿en qué puedo ayudarte?")
        assert result.message == "Hola, ¿en qué puedo ayudarte?"
        assert result.action is None

    def test_formatted_advice_kept_verbatim(self):
        text = "Para mejorar tu perfil:\n\n- Añade **logros**\n- Usa verbos de acción"
        result = extract_response(text)
        assert result.message == text
        assert result.action is None

    def test_stray_braces_in_prose(self):
        text = "Usa llaves como { y } para marcar variables."
        result = extract_response(text)
        assert result.message == text
        assert result.action is None

    def test_json_without_envelope_keys(self):
        text = 'Un ejemplo de JSON: {"name": "AWS"}'
        result = extract_response(text)
        assert result.message == text
        assert result.action is None

    def test_broken_json(self):
        text = '{"message": "hola", "action": {"type": '
        result = extract_response(text)
        assert result.message == text
        assert result.action is None

    def test_closing_before_opening(self):
        text = "} al revés {"
        assert extract_response(text).message == text

    def test_deeply_nested_json(self):
        text = '{"message": "x", "action": ' + "[" * 100000 + "]" * 100000 + "}"
        result = extract_response(text)
        assert result.message == text
        assert result.action is None


class TestBoundaryHeuristic:
    def test_candidate_bounds(self):
        assert find_json_candidate('x {"a": {"b": 1}} y') == '{"a": {"b": 1}}'

    def test_no_candidate(self):
        assert find_json_candidate("sin llaves") is None
        assert find_json_candidate("solo {") is None

    def test_multiple_objects_overcapture(self):
        text = '{"message": "uno"} y luego {"message": "dos"}'
        # First-open/last-close spans both objects
        assert find_json_candidate(text) == text

    def test_multiple_objects_fall_back_to_advisory(self):
        text = 'Primero {"message": "uno"} y luego {"message": "dos"}'
        result = extract_response(text)
        assert result.message == text
        assert result.action is None

    def test_trailing_brace_in_prose_overcaptures(self):
        text = json.dumps(ACTION_REPLY) + " espero que sirva :}"
        result = extract_response(text)
        assert result.message == text
        assert result.action is None

    def test_strip_code_fence(self):
        assert strip_code_fence("```json\n{}\n```") == "{}"
        assert strip_code_fence("no fence") == "no fence"
