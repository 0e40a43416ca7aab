"""Sample classic bots and capability profiles used by the demo surfaces."""

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from ..models.configuration import (
    Authorization,
    AuthorizationType,
    AutomationFlow,
    Channel,
    ChannelType,
    ComponentType,
    CustomComponent,
    Entity,
    EntityType,
    SkillReference,
    SourceConfiguration,
    Topic,
    TopicType,
)
from ..models.delta import CapabilityProfile


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


CLASSIC_BOTS: Tuple[SourceConfiguration, ...] = (
    SourceConfiguration(
        id="bot-1",
        name="Customer Support Bot",
        description="Handles customer inquiries and support tickets",
        topics=(
            Topic("t1", "General Inquiries", "Basic customer questions", TopicType.WEB_CANVAS, "...", True),
            Topic("t2", "Technical Support", "Technical issues and troubleshooting", TopicType.WEB_CANVAS, "...", True),
            Topic("t3", "Billing Questions", "Payment and billing inquiries", TopicType.CODE, "...", False),
        ),
        entities=(
            Entity("e1", "Product", EntityType.CUSTOM, ("item", "service")),
            Entity("e2", "IssueType", EntityType.CUSTOM, ("problem", "error")),
        ),
        automation_flows=(
            AutomationFlow("f1", "Create Support Ticket", "Creates a new support ticket", "user_message", ("create_ticket",)),
            AutomationFlow("f2", "Send Email Notification", "Sends email to support team", "ticket_created", ("send_email",)),
        ),
        channels=(
            Channel("c1", "Teams", ChannelType.TEAMS),
            Channel("c2", "Web Chat", ChannelType.WEB),
        ),
        authorization=Authorization(AuthorizationType.AZURE_AD),
        skills=(
            SkillReference("s1", "Calendar Skill", "https://calendar-skill.azurewebsites.net", "app-1"),
        ),
        custom_components=(
            CustomComponent("cc1", "CRM Integration", ComponentType.API, "https://api.crm.com"),
        ),
        created_at=_ts("2024-01-01T00:00:00"),
        last_modified=_ts("2024-06-18T00:00:00"),
    ),
    SourceConfiguration(
        id="bot-2",
        name="Sales Assistant Bot",
        description="Helps with sales inquiries and lead qualification",
        topics=(
            Topic("t4", "Product Information", "Product details and pricing", TopicType.WEB_CANVAS, "...", True),
            Topic("t5", "Lead Qualification", "Qualifies sales leads", TopicType.WEB_CANVAS, "...", True),
        ),
        entities=(
            Entity("e3", "Lead", EntityType.CUSTOM, ("prospect", "potential")),
            Entity("e4", "Product", EntityType.CUSTOM, ("solution", "service")),
        ),
        automation_flows=(
            AutomationFlow("f3", "Create Lead", "Creates a new lead in CRM", "lead_identified", ("create_lead",)),
        ),
        channels=(
            Channel("c3", "Teams", ChannelType.TEAMS),
        ),
        authorization=Authorization(AuthorizationType.AZURE_AD),
        custom_components=(
            CustomComponent("cc2", "Salesforce Integration", ComponentType.API, "https://api.salesforce.com"),
        ),
        created_at=_ts("2024-02-01T00:00:00"),
        last_modified=_ts("2024-06-18T00:00:00"),
    ),
)


CLASSIC_PROFILES: Tuple[CapabilityProfile, ...] = (
    CapabilityProfile(
        id="classic-1",
        name="HR FAQ Bot",
        skills=("leave_balance", "policy_info"),
        integrations=("Teams",),
        limitations=("No proactive reminders", "No email integration"),
    ),
    CapabilityProfile(
        id="classic-2",
        name="IT Helpdesk Bot",
        skills=("password_reset", "software_request"),
        integrations=("Teams",),
        limitations=("No predictive analytics", "No workflow automation"),
    ),
)

AGENT_PROFILES: Tuple[CapabilityProfile, ...] = (
    CapabilityProfile(
        id="agent-1",
        name="HR Copilot Agent",
        skills=("leave_balance", "policy_info", "proactive_reminders", "email_summary"),
        integrations=("Teams", "Outlook"),
        new_capabilities=("Proactive reminders", "Email summarization"),
    ),
    CapabilityProfile(
        id="agent-2",
        name="IT Copilot Agent",
        skills=("password_reset", "software_request", "predictive_analytics", "workflow_automation"),
        integrations=("Teams", "Power Automate"),
        new_capabilities=("Predictive analytics", "Workflow automation"),
    ),
)


def list_classic_bots() -> List[SourceConfiguration]:
    return list(CLASSIC_BOTS)


def get_classic_bot(bot_id: str) -> Optional[SourceConfiguration]:
    for bot in CLASSIC_BOTS:
        if bot.id == bot_id:
            return bot
    return None


def delta_scenario(classic_id: Optional[str] = None) -> Tuple[CapabilityProfile, CapabilityProfile]:
    """
    Pair a classic profile with its migrated agent.

    Unknown or missing ids fall back to the first scenario.
    """
    for idx, classic in enumerate(CLASSIC_PROFILES):
        if classic.id == classic_id:
            agent = AGENT_PROFILES[idx] if idx < len(AGENT_PROFILES) else AGENT_PROFILES[0]
            return classic, agent
    return CLASSIC_PROFILES[0], AGENT_PROFILES[0]
