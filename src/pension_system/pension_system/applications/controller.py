from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.guards import build_guards, current_user
from ..common.validators import FieldValidator
from ..core.enums import NomineeRelation, PensionType, Role
from ..core.exceptions import ValidationError
from ..container import Container
from .certificate import certificate_number, render_certificate
from .model import ApplicationDetails, BankInfo, NomineeInfo, PersonalInfo, ServiceInfo
from .serializers import application_to_dict


def _section(body: dict, key: str) -> FieldValidator:
    """Validator over a nested block, or over the flat body when the block is absent."""
    block = body.get(key)
    if isinstance(block, dict):
        return FieldValidator(block, prefix=f"{key}.")
    return FieldValidator(body)


def parse_application_body(body) -> ApplicationDetails:
    """Validate an application payload; every bad field is reported at once.

    Accepts either nested `personalInfo`/`serviceInfo`/`bankInfo`/`nomineeInfo`
    blocks or the same fields flat at the top level, as the web form posts them.
    """
    body = body if isinstance(body, dict) else {}

    personal = _section(body, "personalInfo")
    full_name = personal.text("fullName", "Full name is required", min_len=2)
    nid = personal.text("nid", "Valid NID is required", min_len=10)
    phone = personal.text("phone", "Phone is invalid", required=False)
    email = personal.email("email", "Please provide a valid email", required=False)
    date_of_birth = personal.iso_date("dateOfBirth", "Date of birth must be a valid date", required=False)
    address = personal.text("address", "Address is invalid", required=False)

    service = _section(body, "serviceInfo")
    employee_id = service.text("employeeId", "Employee ID is required")
    salary = service.number("lastBasicSalary", "Valid salary is required", min_value=0)
    service_years = service.number("serviceYears", "Service years must be a number", min_value=0, required=False)
    joining_date = service.iso_date("joiningDate", "Joining date must be a valid date", required=False)
    retirement_date = service.iso_date("retirementDate", "Retirement date must be a valid date", required=False)
    pension_type = service.choice("pensionType", PensionType, "Invalid pension type", default=PensionType.RETIREMENT)
    department = service.text("department", "Department is invalid", required=False)
    designation = service.text("designation", "Designation is invalid", required=False)

    bank = _section(body, "bankInfo")
    nominee = _section(body, "nomineeInfo")
    relation = None
    if nominee.has("nomineeRelation"):
        relation = nominee.choice("nomineeRelation", NomineeRelation, "Invalid nominee relation")

    errors = personal.errors + service.errors + bank.errors + nominee.errors
    if errors:
        raise ValidationError("Validation failed", errors=errors)

    return ApplicationDetails(
        personal_info=PersonalInfo(
            full_name=full_name,
            nid=nid,
            phone=phone,
            email=email,
            date_of_birth=date_of_birth,
            address=address,
        ),
        service_info=ServiceInfo(
            employee_id=employee_id,
            last_basic_salary=salary,
            service_years=service_years,
            department=department,
            designation=designation,
            joining_date=joining_date,
            retirement_date=retirement_date,
            pension_type=pension_type,
        ),
        bank_info=BankInfo(
            bank_name=bank.text("bankName", "", required=False),
            branch_name=bank.text("branchName", "", required=False),
            account_number=bank.text("accountNumber", "", required=False),
            routing_number=bank.text("routingNumber", "", required=False),
        ),
        nominee_info=NomineeInfo(
            nominee_name=nominee.text("nomineeName", "", required=False),
            nominee_relation=relation,
            nominee_nid=nominee.text("nomineeNid", "", required=False),
            nominee_address=nominee.text("nomineeAddress", "", required=False),
        ),
        special_circumstances=(str(body.get("specialCircumstances") or "")).strip() or None,
    )


def register(app: Flask, container: Container) -> None:
    _, roles_required = build_guards(container.auth_service)
    service = container.application_service

    # -------- Pension holder --------
    @app.route("/api/pension-holder/applications", methods=["GET"], endpoint="holder_list_applications")
    @roles_required(Role.PENSION_HOLDER)
    def holder_list_applications():
        apps = service.list_mine(pension_holder_id=current_user().user_id)
        return jsonify([application_to_dict(a) for a in apps])

    @app.route("/api/pension-holder/applications", methods=["POST"], endpoint="holder_submit_application")
    @roles_required(Role.PENSION_HOLDER)
    def holder_submit_application():
        details = parse_application_body(request.get_json(silent=True))
        created = service.submit(pension_holder_id=current_user().user_id, details=details)
        return (
            jsonify(message="Application submitted successfully", application=application_to_dict(created)),
            201,
        )

    @app.route(
        "/api/pension-holder/applications/<int:application_id>",
        methods=["PUT"],
        endpoint="holder_resubmit_application",
    )
    @roles_required(Role.PENSION_HOLDER)
    def holder_resubmit_application(application_id: int):
        details = parse_application_body(request.get_json(silent=True))
        updated = service.resubmit(
            pension_holder_id=current_user().user_id,
            application_id=application_id,
            details=details,
        )
        return jsonify(message="Application resubmitted successfully", application=application_to_dict(updated))

    @app.route(
        "/api/pension-holder/applications/<int:application_id>/pdf",
        methods=["GET"],
        endpoint="holder_application_pdf",
    )
    @roles_required(Role.PENSION_HOLDER)
    def holder_application_pdf(application_id: int):
        user = current_user()
        approved = service.approved_for_holder(pension_holder_id=user.user_id, application_id=application_id)
        pdf = render_certificate(approved, holder_name=user.name)
        return send_file(
            io.BytesIO(pdf),
            mimetype="application/pdf",
            as_attachment=True,
            download_name=f"{certificate_number(approved)}.pdf",
        )

    # -------- Manager --------
    @app.route("/api/manager/applications", methods=["GET"], endpoint="manager_list_applications")
    @roles_required(Role.MANAGER)
    def manager_list_applications():
        rows = service.list_for_review()
        return jsonify([application_to_dict(r.application, pension_holder_name=r.pension_holder_name) for r in rows])

    @app.route("/api/manager/applications/<int:application_id>", methods=["GET"], endpoint="manager_get_application")
    @roles_required(Role.MANAGER)
    def manager_get_application(application_id: int):
        found = service.get(application_id)
        return jsonify(application_to_dict(found, pension_holder_name=service.holder_name(found)))

    @app.route(
        "/api/manager/applications/<int:application_id>/review",
        methods=["PUT"],
        endpoint="manager_start_review",
    )
    @roles_required(Role.MANAGER)
    def manager_start_review(application_id: int):
        updated = service.start_review(manager_id=current_user().user_id, application_id=application_id)
        return jsonify(message="Application is now under review", application=application_to_dict(updated))

    @app.route(
        "/api/manager/applications/<int:application_id>/approve",
        methods=["PUT"],
        endpoint="manager_approve_application",
    )
    @roles_required(Role.MANAGER)
    def manager_approve_application(application_id: int):
        data = request.get_json(silent=True) or {}
        updated = service.approve(
            manager_id=current_user().user_id,
            application_id=application_id,
            comments=str(data.get("comments") or ""),
        )
        return jsonify(message="Application approved successfully", application=application_to_dict(updated))

    @app.route(
        "/api/manager/applications/<int:application_id>/reject",
        methods=["PUT"],
        endpoint="manager_reject_application",
    )
    @roles_required(Role.MANAGER)
    def manager_reject_application(application_id: int):
        v = FieldValidator(request.get_json(silent=True))
        comments = v.text("comments", "Rejection reason must be at least 10 characters", min_len=10)
        v.raise_if_errors()

        updated = service.reject(manager_id=current_user().user_id, application_id=application_id, comments=comments)
        return jsonify(message="Application rejected", application=application_to_dict(updated))

    @app.route(
        "/api/manager/applications/<int:application_id>/feedback",
        methods=["PUT"],
        endpoint="manager_feedback_application",
    )
    @roles_required(Role.MANAGER)
    def manager_feedback_application(application_id: int):
        v = FieldValidator(request.get_json(silent=True))
        comments = v.text("comments", "Feedback must be at least 5 characters", min_len=5)
        field = v.text("field", "Field is invalid", required=False)
        v.raise_if_errors()

        updated = service.request_feedback(
            manager_id=current_user().user_id,
            application_id=application_id,
            comments=comments,
            field=field,
        )
        return jsonify(message="Feedback sent to pension holder", application=application_to_dict(updated))

    @app.route("/api/manager/stats", methods=["GET"], endpoint="manager_stats")
    @roles_required(Role.MANAGER)
    def manager_stats():
        return jsonify(service.stats())
