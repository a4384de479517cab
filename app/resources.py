"""Catalogue of clinical resources served by the generic engine.

Each entry declares what is searchable, filterable and sortable, who may
write, and which foreign ids must be checked before a write.
"""

from datetime import datetime, timezone

from app.core.deps import RoutePolicy
from app.models.claim import Claim
from app.models.dialysis_session import DialysisSession
from app.models.encounter import Encounter
from app.models.enums import (
    CkdStage,
    ClaimStatus,
    DialysisStatus,
    EncounterStatus,
    Gender,
    LabResultFlag,
    LabResultStatus,
    MedicationOrderStatus,
    MedicationRoute,
    Role,
    VisitStatus,
)
from app.models.lab import LabResult, LabTest, ReferenceRange, TestPanel
from app.models.medication_order import MedicationOrder
from app.models.nephrology_visit import NephrologyVisit
from app.models.patient import Patient
from app.models.user import User
from app.schemas.claim import ClaimCreate, ClaimOut, ClaimUpdate
from app.schemas.clinical import (
    DialysisSessionCreate,
    DialysisSessionOut,
    DialysisSessionUpdate,
    EncounterCreate,
    EncounterOut,
    EncounterUpdate,
    MedicationOrderCreate,
    MedicationOrderOut,
    MedicationOrderUpdate,
    NephrologyVisitCreate,
    NephrologyVisitOut,
    NephrologyVisitUpdate,
)
from app.schemas.lab import (
    LabResultCreate,
    LabResultOut,
    LabResultUpdate,
    LabTestCreate,
    LabTestOut,
    LabTestUpdate,
    ReferenceRangeCreate,
    ReferenceRangeOut,
    ReferenceRangeUpdate,
    TestPanelCreate,
    TestPanelOut,
    TestPanelUpdate,
)
from app.schemas.patient import PatientCreate, PatientOut, PatientUpdate
from app.schemas.provider import ProviderCreate, ProviderOut, ProviderUpdate
from app.services.query_builder import (
    FilterField,
    ResourceDescriptor,
    enum_parser,
    parse_bool,
    parse_text,
    parse_uuid,
    sortable,
)
from app.services.reference_ranges import flag_value, resolve_reference_range
from app.services.references import ReferenceDependency, active_clinician, is_active, same_patient
from app.services.resource_service import Resource, ends_after, ordered

ADMIN_ONLY = RoutePolicy.of(Role.ADMIN)
CLINICAL_STAFF = RoutePolicy.of(Role.ADMIN, Role.DOCTOR, Role.NURSE)
PHYSICIANS = RoutePolicy.of(Role.ADMIN, Role.DOCTOR)
FRONT_DESK = RoutePolicy.of(Role.ADMIN, Role.DOCTOR, Role.NURSE, Role.RECEPTIONIST)
BILLING = RoutePolicy.of(Role.ADMIN, Role.RECEPTIONIST)

PATIENT_SEARCH = ("patient.first_name", "patient.last_name", "patient.mrn")


def patient_ref() -> ReferenceDependency:
    return ReferenceDependency("patient_id", Patient, "Patient")


def provider_ref(label: str = "Provider") -> ReferenceDependency:
    return ReferenceDependency(
        "provider_id",
        User,
        label,
        constraint=active_clinician,
        reason=f"{label} must be an active clinician",
    )


def care_filters(status_enum) -> tuple[FilterField, ...]:
    return (
        FilterField("status", enum_parser(status_enum), multi=True),
        FilterField("patient_id", parse_uuid),
        FilterField("provider_id", parse_uuid),
    )


def _flag_lab_result(store, changes, record, identity, existing):
    """Stamp technician/time on create and (re)compute the flag from the patient's reference range."""
    if existing is None:
        changes["resulted_at"] = datetime.now(timezone.utc)
        if identity is not None:
            changes["technician_id"] = identity.id
    if existing is None or "numeric_value" in changes:
        patient = store.find_by_id(Patient, record["patient_id"])
        reference_range = resolve_reference_range(
            store, record["test_id"], patient.gender, patient.date_of_birth
        )
        changes["flag"] = flag_value(record.get("numeric_value"), reference_range)
    return changes


PATIENTS = Resource(
    path="/patients",
    model=Patient,
    label="Patient",
    descriptor=ResourceDescriptor(
        name="patients",
        search_fields=("first_name", "last_name", "mrn", "phone", "email"),
        filters=(
            FilterField("gender", enum_parser(Gender)),
            FilterField("is_active", parse_bool),
        ),
        date_field="created_at",
        sort_fields=sortable("first_name", "last_name", "mrn", "date_of_birth", "created_at"),
        default_sort="created_at",
        default_order="desc",
    ),
    create_schema=PatientCreate,
    update_schema=PatientUpdate,
    out_schema=PatientOut,
    policies={"create": FRONT_DESK, "update": FRONT_DESK, "delete": ADMIN_ONLY},
    unique_fields=("mrn",),
)

PROVIDERS = Resource(
    path="/providers",
    model=User,
    label="Provider",
    descriptor=ResourceDescriptor(
        name="providers",
        search_fields=("first_name", "last_name", "email", "specialty", "phone", "license_number"),
        filters=(
            FilterField("role", enum_parser(Role), multi=True, default=(Role.DOCTOR, Role.NURSE)),
            FilterField("is_active", parse_bool),
            FilterField("specialty", parse_text),
        ),
        sort_fields=sortable("first_name", "last_name", "email", "role", "specialty", "created_at", "updated_at"),
        default_sort="last_name",
        default_order="asc",
    ),
    create_schema=ProviderCreate,
    update_schema=ProviderUpdate,
    out_schema=ProviderOut,
    policies={"create": ADMIN_ONLY, "update": ADMIN_ONLY, "delete": ADMIN_ONLY},
    unique_fields=("email",),
)

DIALYSIS_SESSIONS = Resource(
    path="/dialysis-sessions",
    model=DialysisSession,
    label="Dialysis session",
    descriptor=ResourceDescriptor(
        name="dialysis_sessions",
        search_fields=PATIENT_SEARCH + ("patient.phone", "provider.first_name", "provider.last_name"),
        filters=care_filters(DialysisStatus),
        date_field="start_time",
        sort_fields=sortable("start_time", "end_time", "status", "created_at"),
        default_sort="start_time",
        default_order="desc",
    ),
    create_schema=DialysisSessionCreate,
    update_schema=DialysisSessionUpdate,
    out_schema=DialysisSessionOut,
    policies={"create": CLINICAL_STAFF, "update": CLINICAL_STAFF, "delete": PHYSICIANS},
    dependencies=(patient_ref(), provider_ref()),
    checks=(ends_after("start_time", "end_time"),),
)

NEPHROLOGY_VISITS = Resource(
    path="/nephrology-visits",
    model=NephrologyVisit,
    label="Nephrology visit",
    descriptor=ResourceDescriptor(
        name="nephrology_visits",
        search_fields=PATIENT_SEARCH + ("chief_complaint", "provider.last_name"),
        filters=care_filters(VisitStatus) + (FilterField("ckd_stage", enum_parser(CkdStage), multi=True),),
        date_field="visit_date",
        sort_fields=sortable("visit_date", "status", "ckd_stage", "egfr", "created_at"),
        default_sort="visit_date",
        default_order="desc",
    ),
    create_schema=NephrologyVisitCreate,
    update_schema=NephrologyVisitUpdate,
    out_schema=NephrologyVisitOut,
    policies={"create": CLINICAL_STAFF, "update": CLINICAL_STAFF, "delete": PHYSICIANS},
    dependencies=(patient_ref(), provider_ref()),
)

ENCOUNTERS = Resource(
    path="/encounters",
    model=Encounter,
    label="Encounter",
    descriptor=ResourceDescriptor(
        name="encounters",
        search_fields=PATIENT_SEARCH + ("reason", "encounter_type"),
        filters=care_filters(EncounterStatus),
        date_field="start_at",
        sort_fields=sortable("start_at", "end_at", "status", "created_at"),
        default_sort="start_at",
        default_order="desc",
    ),
    create_schema=EncounterCreate,
    update_schema=EncounterUpdate,
    out_schema=EncounterOut,
    policies={"create": CLINICAL_STAFF, "update": CLINICAL_STAFF, "delete": ADMIN_ONLY},
    dependencies=(patient_ref(), provider_ref()),
    checks=(ends_after("start_at", "end_at"),),
)

MEDICATION_ORDERS = Resource(
    path="/medication-orders",
    model=MedicationOrder,
    label="Medication order",
    descriptor=ResourceDescriptor(
        name="medication_orders",
        search_fields=("medication_name",) + PATIENT_SEARCH,
        filters=care_filters(MedicationOrderStatus) + (
            FilterField("route", enum_parser(MedicationRoute)),
            FilterField("encounter_id", parse_uuid),
        ),
        date_field="start_date",
        sort_fields=sortable("start_date", "end_date", "medication_name", "status", "created_at"),
        default_sort="start_date",
        default_order="desc",
    ),
    create_schema=MedicationOrderCreate,
    update_schema=MedicationOrderUpdate,
    out_schema=MedicationOrderOut,
    policies={"create": PHYSICIANS, "update": PHYSICIANS, "delete": ADMIN_ONLY},
    dependencies=(
        patient_ref(),
        provider_ref("Prescriber"),
        ReferenceDependency(
            "encounter_id",
            Encounter,
            "Encounter",
            constraint=same_patient,
            reason="Encounter must belong to the same patient",
        ),
    ),
    checks=(ends_after("start_date", "end_date"),),
)

LAB_TESTS = Resource(
    path="/lab-tests",
    model=LabTest,
    label="Lab test",
    descriptor=ResourceDescriptor(
        name="lab_tests",
        search_fields=("code", "name", "category"),
        filters=(FilterField("is_active", parse_bool), FilterField("category", parse_text)),
        sort_fields=sortable("code", "name", "category", "created_at"),
        default_sort="name",
        default_order="asc",
    ),
    create_schema=LabTestCreate,
    update_schema=LabTestUpdate,
    out_schema=LabTestOut,
    policies={"create": ADMIN_ONLY, "update": ADMIN_ONLY, "delete": ADMIN_ONLY},
    unique_fields=("code",),
)

TEST_PANELS = Resource(
    path="/test-panels",
    model=TestPanel,
    label="Test panel",
    descriptor=ResourceDescriptor(
        name="test_panels",
        search_fields=("code", "name", "description"),
        filters=(FilterField("is_active", parse_bool),),
        sort_fields=sortable("code", "name", "created_at"),
        default_sort="name",
        default_order="asc",
    ),
    create_schema=TestPanelCreate,
    update_schema=TestPanelUpdate,
    out_schema=TestPanelOut,
    policies={"create": ADMIN_ONLY, "update": ADMIN_ONLY, "delete": ADMIN_ONLY},
    unique_fields=("code",),
)

REFERENCE_RANGES = Resource(
    path="/reference-ranges",
    model=ReferenceRange,
    label="Reference range",
    descriptor=ResourceDescriptor(
        name="reference_ranges",
        search_fields=("test.name", "test.code", "reference_text"),
        filters=(
            FilterField("test_id", parse_uuid),
            FilterField("gender", enum_parser(Gender)),
            FilterField("is_default", parse_bool),
        ),
        sort_fields=sortable("age_min", "age_max", "gender", "created_at"),
        default_sort="created_at",
        default_order="asc",
    ),
    create_schema=ReferenceRangeCreate,
    update_schema=ReferenceRangeUpdate,
    out_schema=ReferenceRangeOut,
    policies={"create": PHYSICIANS, "update": PHYSICIANS, "delete": ADMIN_ONLY},
    dependencies=(ReferenceDependency("test_id", LabTest, "Lab test"),),
    checks=(
        ordered("age_min", "age_max"),
        ordered("low_value", "high_value"),
        ordered("critical_low", "critical_high"),
    ),
)

LAB_RESULTS = Resource(
    path="/lab-results",
    model=LabResult,
    label="Lab result",
    descriptor=ResourceDescriptor(
        name="lab_results",
        search_fields=PATIENT_SEARCH + ("test.name", "test.code"),
        filters=(
            FilterField("patient_id", parse_uuid),
            FilterField("test_id", parse_uuid),
            FilterField("status", enum_parser(LabResultStatus), multi=True),
            FilterField("flag", enum_parser(LabResultFlag), multi=True),
        ),
        date_field="resulted_at",
        sort_fields=sortable("resulted_at", "status", "flag", "created_at"),
        default_sort="resulted_at",
        default_order="desc",
    ),
    create_schema=LabResultCreate,
    update_schema=LabResultUpdate,
    out_schema=LabResultOut,
    policies={"create": CLINICAL_STAFF, "update": PHYSICIANS, "delete": ADMIN_ONLY},
    dependencies=(
        patient_ref(),
        ReferenceDependency(
            "test_id",
            LabTest,
            "Lab test",
            constraint=is_active,
            reason="Lab test is not active",
        ),
    ),
    prepare=_flag_lab_result,
)

CLAIMS = Resource(
    path="/claims",
    model=Claim,
    label="Claim",
    descriptor=ResourceDescriptor(
        name="claims",
        search_fields=("claim_number", "payer_name") + PATIENT_SEARCH,
        filters=(
            FilterField("status", enum_parser(ClaimStatus), multi=True),
            FilterField("patient_id", parse_uuid),
        ),
        date_field="submitted_at",
        sort_fields=sortable("claim_number", "amount", "status", "submitted_at", "created_at"),
        default_sort="created_at",
        default_order="desc",
    ),
    create_schema=ClaimCreate,
    update_schema=ClaimUpdate,
    out_schema=ClaimOut,
    policies={"create": BILLING, "update": BILLING, "delete": ADMIN_ONLY},
    dependencies=(patient_ref(),),
    unique_fields=("claim_number",),
)

RESOURCES = (
    PATIENTS,
    PROVIDERS,
    ENCOUNTERS,
    DIALYSIS_SESSIONS,
    NEPHROLOGY_VISITS,
    MEDICATION_ORDERS,
    LAB_TESTS,
    TEST_PANELS,
    REFERENCE_RANGES,
    LAB_RESULTS,
    CLAIMS,
)
