"""Generation capability: conversation -> plan -> artifacts."""

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from ..exceptions import GenerationError
from ..logging_config import get_logger
from ..schemas import AppPlan, ConversationMessage, GeneratedArtifacts
from .parser import parse_artifacts, parse_plan
from .prompts import CODE_REQUEST_TEMPLATE, CODE_SYSTEM_PROMPT, PLAN_REQUEST, PLAN_SYSTEM_PROMPT

logger = get_logger(__name__)


def _to_chat_message(message: ConversationMessage) -> BaseMessage:
    if message.role == "assistant":
        return AIMessage(content=message.content)
    return HumanMessage(content=message.content)


def _message_text(message: BaseMessage) -> str:
    content = message.content
    if isinstance(content, str):
        return content
    # Some providers return a list of content parts
    return "".join(
        part.get("text", "") if isinstance(part, dict) else str(part) for part in content
    )


class AppGenerator:
    """Two-step generation over a chat model."""

    def __init__(self, llm: BaseChatModel):
        self.llm = llm

    async def _invoke(self, messages: list[BaseMessage], step: str) -> str:
        try:
            response = await self.llm.ainvoke(messages)
        except Exception as e:
            logger.warning("generation_call_failed", step=step, error=str(e))
            raise GenerationError(f"{step} generation call failed: {e}") from e
        text = _message_text(response)
        logger.debug("generation_output_received", step=step, chars=len(text))
        return text

    async def produce_plan(self, conversation: list[ConversationMessage]) -> AppPlan:
        """Derive a structured application plan from the full conversation."""
        messages: list[BaseMessage] = [SystemMessage(content=PLAN_SYSTEM_PROMPT)]
        messages.extend(_to_chat_message(m) for m in conversation if m.role != "system")
        messages.append(HumanMessage(content=PLAN_REQUEST))

        plan = parse_plan(await self._invoke(messages, "plan"))
        logger.info(
            "plan_generated",
            app_name=plan.app_name,
            pages=len(plan.pages),
            tables=[t.name for t in plan.data_model.tables],
        )
        return plan

    async def produce_code(
        self, plan: AppPlan, recent_conversation: list[ConversationMessage]
    ) -> GeneratedArtifacts:
        """Generate script, document and migration from a plan and recent context."""
        transcript = "\n".join(f"{m.role}: {m.content}" for m in recent_conversation)
        messages: list[BaseMessage] = [
            SystemMessage(content=CODE_SYSTEM_PROMPT),
            HumanMessage(
                content=CODE_REQUEST_TEMPLATE.format(
                    plan=plan.to_prompt_json(), conversation=transcript
                )
            ),
        ]

        artifacts = parse_artifacts(await self._invoke(messages, "code"))
        logger.info(
            "code_generated",
            script_chars=len(artifacts.script),
            document_chars=len(artifacts.document),
            migration_chars=len(artifacts.migration),
        )
        return artifacts
