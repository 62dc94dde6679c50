"""System prompt assembly.

The prompt is rebuilt for every model call so it always reflects the latest
to-do and memory state:

    persona preamble → project context → to-do list → remembered notes
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import frontmatter

if TYPE_CHECKING:
    from stark.memory.facts import FactLedger
    from stark.memory.todos import TodoLedger

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_CONTEXT = """\
# Project Stark - Fysio Assistent

## Wat is het?
Fysio Assistent is een premium AI-powered SaaS platform voor Nederlandse fysiotherapeuten.
Het biedt een 7-stappen behandelflow met AI-begeleiding en 6 standalone AI-tools.

## Core Value Proposition
Fysiotherapeuten helpen betere, evidence-based behandelplannen te maken.
AI assisteert maar vervangt NOOIT - de therapeut houdt altijd de controle.

## Tech Stack
- Frontend: Next.js 15 (App Router), TypeScript, Tailwind CSS, shadcn/ui, Framer Motion
- Backend: Next.js API Routes, Prisma ORM
- Database: SQLite (dev) → Supabase PostgreSQL (prod)
- Auth: Supabase Auth
- AI: Anthropic Claude API, Server-Sent Events streaming
- Deployment: Vercel

## De 7-Stappen Behandelflow
1. Nieuw Traject - Patient selecteren, klacht invoeren
2. Screening - AI genereert screeningsvragen, red flags detectie
3. Anamnese - AI-begeleide anamnese met follow-up vragen
4. Samenvatting - AI maakt gestructureerde samenvatting
5. Tussentijdse Hypothese - AI genereert differentiaal diagnose
6. Definitieve Hypothese - Verfijnde hypothese na lichamelijk onderzoek
7. Behandeltraject - Compleet behandelplan met SMART doelen

## 6 Standalone Tools
Screening, Anamnese, Hypothese, Lichamelijk Onderzoek, Behandelplan, Behandeling.

## Design Principes
- Premium, futuristisch design, glassmorphism, smooth animaties
- Dark/light mode, desktop-first, mobile-responsive
- Alle UI tekst in het Nederlands

## Timeline
- Maand 1: Foundation (auth, patient management, eerste AI features)
- Maand 2: Complete flow, standalone tools, design polish
- Maand 3: Security, testing, beta, launch

## Doelgroep
Nederlandse fysiotherapeuten (25-55 jaar), zowel ZZP als groepspraktijken.

## Business Model
Premium SaaS - abonnementsmodel (pricing nog te bepalen).
"""

PERSONA = """\
Je bent {assistant}, de AI team-assistent voor {project}.
Je werkt als een slim, betrokken teamlid dat meedenkt over het project.

## Jouw Rol
- Je bent een meedenkende assistent, geen passieve vraag-beantwoorder
- Je kent het project door en door (zie projectcontext hieronder)
- Je houdt to-do lijsten bij en herinnert het team aan taken
- Je onthoudt belangrijke besluiten en gesprekken
- Je bent direct, eerlijk, en pragmatisch
- Je communiceert in het Nederlands (tenzij anders gevraagd)

## Communicatiestijl
- Informeel maar professioneel - je bent een teamlid, geen robot
- Kort en bondig - geen lange lappen tekst tenzij nodig
- Gebruik emoji's spaarzaam maar effectief
- Als je iets niet weet, zeg dat eerlijk

## To-Do Commando's
Als iemand een taak wil toevoegen of afvinken, doe dit dan en bevestig.
- Nieuwe taak: voeg [TODO_ADD: omschrijving] toe aan je bericht.
- Taak afgerond: voeg [TODO_DONE: nummer] toe, met het nummer uit de lijst hieronder.
Als iemand vraagt om de to-do lijst te tonen, toon deze netjes.

## Geheugen
Als er belangrijke besluiten worden genomen of informatie wordt gedeeld die later relevant is,
sla dit op door [ONTHOUD: ...] aan het einde van je bericht toe te voegen.
Het team ziet deze markeringen niet - ze zijn voor jouw eigen administratie.
Gebruik \\] voor een letterlijk ] binnen een markering.
"""


@dataclass
class ProjectContext:
    """Static reference material describing the product the team is building."""

    project: str = "Project Stark (Fysio Assistent)"
    assistant: str = "Stark"
    body: str = DEFAULT_PROJECT_CONTEXT


def load_project_context(path: Path | None = None) -> ProjectContext:
    """Load a project context document; front matter may set project/assistant."""
    if path is None:
        return ProjectContext()

    post = frontmatter.load(str(path))
    defaults = ProjectContext()
    context = ProjectContext(
        project=str(post.metadata.get("project", defaults.project)),
        assistant=str(post.metadata.get("assistant", defaults.assistant)),
        body=post.content.strip(),
    )
    logger.info("Loaded project context from %s (%d chars)", path, len(context.body))
    return context


class PromptComposer:
    """Builds the system prompt for a conversation from current ledger state."""

    def __init__(
        self,
        todos: TodoLedger,
        facts: FactLedger,
        context: ProjectContext | None = None,
    ) -> None:
        self._todos = todos
        self._facts = facts
        self.context = context or ProjectContext()

    def compose(self, chat_id: str) -> str:
        parts = [
            PERSONA.format(assistant=self.context.assistant, project=self.context.project),
            self.context.body.strip(),
            f"## Huidige To-Do Lijst\n{self._todos.render_for_prompt(chat_id)}",
        ]
        memory = self._facts.render(chat_id)
        if memory:
            parts.append(f"## Belangrijke Notities & Besluiten\n{memory}")
        return "\n\n".join(parts) + "\n"
