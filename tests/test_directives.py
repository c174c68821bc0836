"""Tests for ACTION / HANDOFF directive parsing."""

import pytest

from creator_agents.ai.directives import ExternalAction, HandOff, parse_reply, render_message
from creator_agents.core.models import ChatMessage, ToolCall


class TestParseReply:
    def test_plain_text_passes_through(self, agent_registry):
        parsed = parse_reply("Just some ideas.", agent_registry)
        assert parsed.display_text == "Just some ideas."
        assert parsed.affordances == ()

    def test_handoff_is_stripped_and_labelled(self, agent_registry):
        text = 'Here are ideas. HANDOFF:[writer,"write a script about X"]'
        parsed = parse_reply(text, agent_registry)
        assert parsed.display_text == "Here are ideas."
        assert len(parsed.affordances) == 1
        handoff = parsed.affordances[0]
        assert isinstance(handoff, HandOff)
        assert handoff.agent_id == "writer"
        assert handoff.prompt == "write a script about X"
        assert handoff.label == "Ask Creative Writer"

    def test_unknown_handoff_target_is_stripped_without_affordance(self, agent_registry):
        parsed = parse_reply('Sure. HANDOFF:[ghost,"boo"]', agent_registry)
        assert parsed.display_text == "Sure."
        assert parsed.affordances == ()

    def test_external_action(self, agent_registry):
        parsed = parse_reply('Drafted it. ACTION:[EMAIL,"Hi Acme, let us partner."]', agent_registry)
        assert parsed.display_text == "Drafted it."
        action = parsed.affordances[0]
        assert isinstance(action, ExternalAction)
        assert action.service == "EMAIL"
        assert action.label == "Send to Email"
        assert action.completion_notice().startswith("Email action completed (simulated)")

    @pytest.mark.parametrize(
        "directive",
        ['ACTION:[ EMAIL, "x"]', 'ACTION:[EMAIL , "x"]', 'ACTION:[ EMAIL ,"x"]', 'ACTION:[\n  EMAIL,\n  "x"]'],
    )
    def test_external_action_tolerates_whitespace(self, agent_registry, directive):
        parsed = parse_reply(f"Drafted it. {directive}", agent_registry)
        assert parsed.display_text == "Drafted it."
        (action,) = parsed.affordances
        assert action.service == "EMAIL"
        assert action.payload == "x"

    def test_unknown_service_is_left_alone(self, agent_registry):
        text = 'ACTION:[FAX,"hello"]'
        parsed = parse_reply(text, agent_registry)
        assert parsed.display_text == text
        assert parsed.affordances == ()

    def test_multiline_payload(self, agent_registry):
        text = 'Script below.\nHANDOFF:[writer,"Scene 1:\nopen on kitchen\nScene 2: taste"]\n'
        parsed = parse_reply(text, agent_registry)
        assert parsed.display_text == "Script below."
        assert parsed.affordances[0].prompt == "Scene 1:\nopen on kitchen\nScene 2: taste"

    def test_both_directives_in_source_order(self, agent_registry):
        text = 'A HANDOFF:[growth,"audit"] B ACTION:[SOCIAL_POST,"new video!"] C'
        parsed = parse_reply(text, agent_registry)
        assert [type(a) for a in parsed.affordances] == [HandOff, ExternalAction]
        assert "HANDOFF" not in parsed.display_text
        assert "ACTION" not in parsed.display_text
        assert parsed.display_text.startswith("A")
        assert parsed.display_text.endswith("C")

        reordered = parse_reply('ACTION:[TEAM_CHAT,"ping"] then HANDOFF:[growth,"audit"]', agent_registry)
        assert [type(a) for a in reordered.affordances] == [ExternalAction, HandOff]

    @pytest.mark.parametrize(
        "text",
        [
            'Ideas. HANDOFF:[writer,"go"]',
            'ACTION:[CLOUD_DRIVE,"notes"] HANDOFF:[nobody,"x"]',
            "no directives here",
        ],
    )
    def test_parsing_is_idempotent(self, agent_registry, text):
        first = parse_reply(text, agent_registry)
        assert parse_reply(text, agent_registry) == first
        again = parse_reply(first.display_text, agent_registry)
        assert again.display_text == first.display_text


class TestRenderMessage:
    def test_only_model_messages_are_parsed(self, agent_registry):
        user_msg = ChatMessage.user('HANDOFF:[writer,"x"]')
        assert render_message(user_msg, agent_registry).affordances == ()
        assert render_message(user_msg, agent_registry).display_text == 'HANDOFF:[writer,"x"]'

        tool_msg = ChatMessage.pending_tool(ToolCall(name="youtubeSearch", args={}))
        assert render_message(tool_msg, agent_registry).affordances == ()

        model_msg = ChatMessage.model('ok HANDOFF:[writer,"x"]')
        assert len(render_message(model_msg, agent_registry).affordances) == 1
