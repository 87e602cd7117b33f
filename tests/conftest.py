import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wizards.entities import Base, Bento, Event, Tip
from wizards.errors import GenerationFailedError
from wizards.event_store import EventStore


class FakeLlm:
    """
    Stand-in for ChatLlmClient. Replies are consumed in order; the last one
    repeats. A reply that is an Exception instance is raised instead.
    """

    def __init__(self, *replies):
        self.replies = list(replies) or ["Ett förslag."]
        self.calls = []

    @property
    def call_count(self):
        return len(self.calls)

    def generate(self, system, user, history=None):
        self.calls.append({"system": system, "user": user, "history": history})
        idx = min(len(self.calls) - 1, len(self.replies) - 1)
        reply = self.replies[idx]
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeLlmFactory:
    """llm_for(purpose) -> FakeLlm; remembers which purposes were asked for."""

    def __init__(self, llm=None, **per_purpose):
        self.default = llm or FakeLlm()
        self.per_purpose = per_purpose
        self.purposes = []

    def __call__(self, purpose):
        self.purposes.append(purpose)
        return self.per_purpose.get(purpose, self.default)

    @property
    def call_count(self):
        llms = {id(l): l for l in [self.default, *self.per_purpose.values()]}
        return sum(l.call_count for l in llms.values())


@pytest.fixture
def fake_llm():
    return FakeLlm()


@pytest.fixture
def failing_llm():
    return FakeLlm(GenerationFailedError("Completion provider failed: boom"))


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    session = factory()
    session.add_all([
        Event(
            id="ev-1",
            name="Höstkickoff",
            subtitle="Tillsammans framåt",
            target_group="Alla medarbetare",
            purpose="Skapa gemensam riktning inför hösten.",
            audience_profile="Deltagarna är nyfikna medarbetare från hela bolaget.",
            program_notes="Heldag med workshops.",
        ),
        Bento(
            id="b-1",
            name="Walk and talk",
            short_description="Samtal i par under en promenad.",
            description="Deltagarna går i par och diskuterar en fråga.",
            purpose_category="Relation",
            category="Samtal",
            type="Övning",
            hopa_profiles=["Interaktörer"],
            eng_level=3,
            nfi_index=4,
            step_1="Introduktion",
            step_1_duration=5,
            step_2="Promenad",
            step_2_duration=15,
        ),
        Bento(
            id="b-2",
            name="Idéstorm",
            short_description="Snabb idégenerering i grupp.",
            purpose_category="Kreativitet",
            hopa_profiles=["Visionärer", "Analytiker"],
            eng_level=4,
            nfi_index=3,
        ),
        Tip(id="t-1", title="Pauser", content="Planera in korta pauser varje timme.", tags="npf, energi"),
        Tip(id="t-2", title="Tydlig agenda", content="Skicka ut agendan i förväg.", tags="förutsägbarhet"),
    ])
    session.commit()
    session.close()

    yield factory
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return EventStore(session_factory)
