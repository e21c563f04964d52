from __future__ import annotations

import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from models import Session
from services.errors import DuplicateKeyError, NotFoundError, PermissionDeniedError, ValidationError


ANA = Session(email="  Ana@Example.com ")
BRUNO = Session(email="bruno@example.com")

ANA_DATA = {
    "name": "Ana Silva",
    "role": "Dev",
    "area": "TI",
    "city": "Recife",
    "state": "PE",
    "linkedinUrl": "https://linkedin.com/in/anasilva",
}

BRUNO_DATA = {
    "name": "Bruno Lima",
    "role": "PM",
    "area": "Produto",
    "city": "Olinda",
    "state": "PE",
    "linkedinUrl": "https://www.linkedin.com/in/bruno-lima/",
}


def test_session_email_is_normalized():
    assert ANA.email == "ana@example.com"
    with pytest.raises(PydanticValidationError):
        Session(email="not-an-email")


def test_create_scenario_with_fallback_enrichment(directory, fake_llm):
    fake_llm.block()
    directory.ai.enhance_timeout = 0.05
    profile = directory.create_profile(ANA, ANA_DATA)
    assert profile.id
    assert profile.location == "Recife - PE"
    assert profile.tags == ["TI", "Networking"]
    assert profile.bio == "Dev atuando na área de TI."

    dup = dict(ANA_DATA, name="Impostor", linkedinUrl="https://linkedin.com/in/AnaSilva")
    with pytest.raises(DuplicateKeyError):
        directory.create_profile(BRUNO, dup)
    assert len(directory.list_profiles(ANA)) == 1


def test_create_applies_model_enrichment_and_binds_session(directory, fake_llm):
    fake_llm.responses["profile_enrichment"] = json.dumps({
        "normalizedRole": "Desenvolvedora de Software",
        "normalizedArea": "Tecnologia da Informação",
        "bio": "Desenvolvedora backend focada em APIs para fintechs.",
        "tags": ["#Python", "#APIs", "#Fintech"],
    })
    profile = directory.create_profile(ANA, dict(ANA_DATA, linkedinAbout="Backend em fintechs"))
    assert profile.role == "Desenvolvedora de Software"
    assert profile.area == "Tecnologia da Informação"
    assert profile.tags == ["#Python", "#APIs", "#Fintech"]
    assert "Backend em fintechs" in fake_llm.calls[0]["prompt"]
    assert directory.my_profile(ANA) == profile
    assert directory.my_profile(BRUNO) is None


def test_duplicate_is_rejected_before_enrichment(directory, fake_llm):
    directory.create_profile(ANA, ANA_DATA)
    calls = len(fake_llm.calls)
    with pytest.raises(DuplicateKeyError):
        directory.create_profile(BRUNO, dict(ANA_DATA, linkedinUrl="https://linkedin.com/in/ANASILVA"))
    assert len(fake_llm.calls) == calls


@pytest.mark.parametrize(
    "override",
    [
        {"linkedinUrl": "https://twitter.com/anasilva"},
        {"linkedinUrl": "http://linkedin.com/in/anasilva"},
        {"linkedinUrl": "https://linkedin.com/company/acme"},
        {"name": "   "},
        {"city": ""},
    ],
)
def test_create_validation_errors_write_nothing(directory, fake_llm, override):
    with pytest.raises(ValidationError):
        directory.create_profile(ANA, dict(ANA_DATA, **override))
    assert directory.list_profiles(ANA) == []
    assert fake_llm.calls == []


def test_create_requires_all_fields(directory):
    data = dict(ANA_DATA)
    data.pop("state")
    with pytest.raises(ValidationError) as excinfo:
        directory.create_profile(ANA, data)
    assert "state" in str(excinfo.value)


def test_update_location_and_timestamp_without_reenrichment(directory, fake_llm):
    created = directory.create_profile(ANA, ANA_DATA)
    calls = len(fake_llm.calls)
    updated = directory.update_profile(ANA, created.id, {"city": "Rio de Janeiro", "state": "RJ"})
    assert updated.location == "Rio de Janeiro - RJ"
    assert updated.updated_at > created.updated_at
    assert updated.tags == created.tags
    assert len(fake_llm.calls) == calls


def test_update_role_reenriches(directory, fake_llm):
    created = directory.create_profile(ANA, ANA_DATA)
    fake_llm.responses["profile_enrichment"] = json.dumps({
        "normalizedRole": "Engenheira de Dados",
        "normalizedArea": "Tecnologia da Informação",
        "bio": "Engenheira de dados construindo pipelines em nuvem.",
        "tags": ["#Dados", "#Cloud", "#SQL"],
    })
    updated = directory.update_profile(ANA, created.id, {"role": "Eng Dados"})
    assert updated.role == "Engenheira de Dados"
    assert updated.tags == ["#Dados", "#Cloud", "#SQL"]
    assert '"TI"' in fake_llm.calls[-1]["prompt"]


def test_update_errors(directory):
    created = directory.create_profile(ANA, ANA_DATA)
    with pytest.raises(NotFoundError):
        directory.update_profile(ANA, "missing", {"city": "Natal"})
    with pytest.raises(PermissionDeniedError):
        directory.update_profile(BRUNO, created.id, {"city": "Natal"})
    with pytest.raises(ValidationError):
        directory.update_profile(ANA, created.id, {"linkedinUrl": "https://example.com"})

    other = directory.create_profile(BRUNO, BRUNO_DATA)
    with pytest.raises(DuplicateKeyError):
        directory.update_profile(BRUNO, other.id, {"linkedinUrl": "https://linkedin.com/in/ANASILVA"})


@pytest.mark.parametrize(
    "changes",
    [
        {"tags": None},
        {"tags": []},
        {"tags": ["  ", ""]},
        {"bio": "x" * 121},
    ],
)
def test_update_rejects_changes_that_break_the_profile(directory, changes):
    created = directory.create_profile(ANA, ANA_DATA)
    with pytest.raises(ValidationError):
        directory.update_profile(ANA, created.id, changes)
    stored = directory.my_profile(ANA)
    assert stored.tags == ["TI", "Networking"]
    assert stored.bio == created.bio


def test_update_accepts_own_tags_and_short_bio(directory):
    created = directory.create_profile(ANA, ANA_DATA)
    updated = directory.update_profile(ANA, created.id, {"tags": [" #Python ", ""], "bio": "Backend em Recife."})
    assert updated.tags == ["#Python"]
    assert updated.bio == "Backend em Recife."


def test_delete_is_owner_only_and_tolerates_missing(directory):
    ana = directory.create_profile(ANA, ANA_DATA)
    directory.delete_profile(ANA, "missing")
    assert len(directory.list_profiles(ANA)) == 1
    with pytest.raises(PermissionDeniedError):
        directory.delete_profile(BRUNO, ana.id)
    directory.delete_profile(ANA, ana.id)
    assert directory.list_profiles(ANA) == []
    assert directory.my_profile(ANA) is None


def test_list_filters_and_options(directory):
    directory.create_profile(ANA, ANA_DATA)
    directory.create_profile(BRUNO, BRUNO_DATA)
    assert [p.name for p in directory.list_profiles(ANA)] == ["Bruno Lima", "Ana Silva"]
    assert [p.name for p in directory.list_profiles(ANA, city="Olinda")] == ["Bruno Lima"]
    assert [p.name for p in directory.list_profiles(ANA, search="networking", area="all")] == ["Bruno Lima", "Ana Silva"]
    assert directory.filter_options(ANA) == {"areas": ["Produto", "TI"], "cities": ["Olinda", "Recife"]}


def test_follow_and_actions(directory):
    bruno = directory.create_profile(BRUNO, BRUNO_DATA)
    url = directory.follow_profile(ANA, bruno.id)
    assert url == "https://www.linkedin.com/in/bruno-lima/"
    directory.track_action(ANA, bruno.id, "open_linkedin")
    directory.track_action(ANA, bruno.id, "assumed_follow")
    assert directory.followed_ids(ANA) == {bruno.id}

    with pytest.raises(NotFoundError):
        directory.track_action(ANA, "missing", "assumed_follow")
    with pytest.raises(ValidationError):
        directory.track_action(ANA, bruno.id, "liked")  # type: ignore[arg-type]

    # Deleting a profile leaves its actions behind
    directory.delete_profile(BRUNO, bruno.id)
    assert directory.followed_ids(ANA) == {bruno.id}


def test_icebreaker_needs_own_profile_and_existing_target(directory, fake_llm):
    bruno = directory.create_profile(BRUNO, BRUNO_DATA)
    with pytest.raises(NotFoundError):
        directory.generate_icebreaker(ANA, bruno.id)

    directory.create_profile(ANA, ANA_DATA)
    with pytest.raises(NotFoundError):
        directory.generate_icebreaker(ANA, "missing")

    fake_llm.responses["icebreaker"] = "Oi Bruno, também sou de Pernambuco. Como é trabalhar com Produto?"
    assert directory.generate_icebreaker(ANA, bruno.id).startswith("Oi Bruno")
    prompt = fake_llm.calls[-1]["prompt"]
    assert "Remetente: Ana Silva" in prompt and "Destinatário: Bruno Lima" in prompt


def test_icebreaker_fallback_when_collaborator_fails(directory, fake_llm):
    bruno = directory.create_profile(BRUNO, BRUNO_DATA)
    directory.create_profile(ANA, ANA_DATA)
    fake_llm.error = RuntimeError("quota exceeded")
    message = directory.generate_icebreaker(ANA, bruno.id)
    assert "Bruno Lima" in message and "Produto" in message
    assert len(message) <= 300 and "#" not in message
