import pytest

from telecare.models.advice import AdviceResult
from telecare.models.reference import Medicine, MedicineSuggestion
from telecare.models.triage import ClassificationResult, Complexity
from telecare.services.response_composer import ResponseComposer, format_medicine
from telecare.tools.doctor_directory import DoctorDirectory

from conftest import CARDIOLOGIST, DERMATOLOGIST, GENERAL_PHYSICIAN, InMemoryDoctorDirectory

BASIC = ClassificationResult(
    complexity=Complexity.BASIC,
    should_see_doctor=False,
    message="Self-care should be enough.",
)
COMPLEX = ClassificationResult(
    complexity=Complexity.COMPLEX,
    should_see_doctor=True,
    specialization="Cardiologist",
    doctors=[CARDIOLOGIST],
    message="See a Cardiologist.",
)


@pytest.fixture
def fever_medicines(dataset):
    fever = dataset.medicines.find("Fever")
    return [MedicineSuggestion(condition=fever.name, medicines=list(fever.medicines))]


def test_format_medicine():
    assert (
        format_medicine(Medicine(name="Paracetamol", dose="500 mg", frequency="Twice daily"))
        == "Paracetamol (500 mg, Twice daily)"
    )
    assert (
        format_medicine(
            Medicine(name="Cetirizine", dose="10 mg", frequency="Once daily", timing="At bedtime")
        )
        == "Cetirizine (10 mg, Once daily, At bedtime)"
    )


def test_basic_chat_with_medicines(fever_medicines):
    composer = ResponseComposer(InMemoryDoctorDirectory(), max_medicines=3)
    response = composer.compose_chat(
        AdviceResult(success=True, message="Rest and drink fluids."), BASIC, fever_medicines
    )

    assert response.message.startswith("Rest and drink fluids.")
    assert "**Suggested Medicines (from dataset) for Fever:**" in response.message
    suggested = response.message.split("for Fever:** ", 1)[1]
    assert suggested.count("; ") == 2
    assert suggested.startswith("Paracetamol (500 mg, Every 6 hours as needed, After food)")
    assert "Cold sponging" not in suggested
    assert response.should_see_doctor is False
    assert response.specialization is None
    assert response.doctors == []
    assert response.medicines == fever_medicines


def test_complex_chat_appends_doctor_recommendation():
    composer = ResponseComposer(InMemoryDoctorDirectory())
    response = composer.compose_chat(AdviceResult(success=True, message="Advice."), COMPLEX, [])

    assert "**Doctor Recommendation:**" in response.message
    assert "consulting with a Cardiologist" in response.message
    assert response.doctors == [CARDIOLOGIST]
    assert response.specialization == "Cardiologist"


def test_failed_advice_uses_classifier_message():
    composer = ResponseComposer(InMemoryDoctorDirectory())
    response = composer.compose_chat(
        AdviceResult(success=False, message="AI service is temporarily unavailable."),
        COMPLEX,
        [],
    )
    assert response.message == "See a Cardiologist."


def test_chat_payload_field_order():
    composer = ResponseComposer(InMemoryDoctorDirectory())
    response = composer.compose_chat(AdviceResult(success=True, message="ok"), BASIC, [])
    payload = response.model_dump(by_alias=True, mode="json")

    assert list(payload) == [
        "success",
        "message",
        "complexity",
        "shouldSeeDoctor",
        "doctors",
        "specialization",
        "timestamp",
        "medicines",
    ]
    assert payload["complexity"] == "basic"


async def test_resolve_doctor_prefers_complex_case_doctor():
    directory = InMemoryDoctorDirectory([GENERAL_PHYSICIAN])
    doctor = await ResponseComposer(directory).resolve_doctor(COMPLEX, "Cardiologist")

    assert doctor == CARDIOLOGIST
    assert directory.patterns == []


async def test_resolve_doctor_by_specialization():
    directory = InMemoryDoctorDirectory([GENERAL_PHYSICIAN, DERMATOLOGIST])
    doctor = await ResponseComposer(directory).resolve_doctor(BASIC, "Dermatologist")
    assert doctor == DERMATOLOGIST


async def test_resolve_doctor_falls_back_to_general_practice():
    directory = InMemoryDoctorDirectory([GENERAL_PHYSICIAN])
    doctor = await ResponseComposer(directory).resolve_doctor(BASIC, "Dentist")

    assert doctor == GENERAL_PHYSICIAN
    assert directory.patterns == ["Dentist", "general|family|primary"]


async def test_resolve_doctor_none_when_directory_unavailable():
    doctor = await ResponseComposer(InMemoryDoctorDirectory(fail=True)).resolve_doctor(
        BASIC, "Dentist"
    )
    assert doctor is None


def test_directory_interface_cannot_be_instantiated():
    with pytest.raises(TypeError):
        DoctorDirectory()

    class Incomplete(DoctorDirectory):
        pass

    with pytest.raises(TypeError):
        Incomplete()
