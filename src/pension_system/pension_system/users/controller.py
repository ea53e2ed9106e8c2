from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.guards import build_guards, current_user
from ..common.validators import FieldValidator
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container
from .serializers import login_user, public_user


def register(app: Flask, container: Container) -> None:
    login_required, roles_required = build_guards(container.auth_service)

    @app.route("/api/pension-holder/register", methods=["POST"], endpoint="holder_register")
    def holder_register():
        v = FieldValidator(request.get_json(silent=True))
        name = v.text("name", "Name must be between 2 and 100 characters", min_len=2, max_len=100)
        email = v.email("email", "Please provide a valid email")
        password = v.text("password", "Password must be at least 6 characters", min_len=6)
        nid = v.text("nid", "NID must be between 10 and 17 characters", min_len=10, max_len=17)
        phone = v.phone("phone", "Please provide a valid phone number")
        employee_id = v.text("employeeId", "Employee ID is required")
        department = v.text("department", "Department is required")
        designation = v.text("designation", "Designation is required")
        joining_date = v.iso_date("joiningDate", "Please provide a valid joining date")
        v.raise_if_errors()

        result = container.auth_service.register_pension_holder(
            name=name,
            email=email,
            password=password,
            nid=nid,
            phone=phone,
            employee_id=employee_id,
            department=department,
            designation=designation,
            joining_date=joining_date,
        )
        return (
            jsonify(
                message="Pension holder registered successfully",
                token=result.token,
                user=login_user(result.user),
            ),
            201,
        )

    def _login(roles):
        v = FieldValidator(request.get_json(silent=True))
        email = v.email("email", "Please provide a valid email")
        password = v.text("password", "Password is required")
        v.raise_if_errors()

        result = container.auth_service.login(email=email, password=password, roles=roles)
        return jsonify(message="Login successful", token=result.token, user=login_user(result.user))

    @app.route("/api/pension-holder/login", methods=["POST"], endpoint="holder_login")
    def holder_login():
        return _login((Role.PENSION_HOLDER,))

    @app.route("/api/auth/login", methods=["POST"], endpoint="staff_login")
    def staff_login():
        return _login((Role.MANAGER, Role.ADMIN))

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def auth_me():
        return jsonify(user=public_user(current_user()))

    @app.route("/api/admin/users", methods=["GET"], endpoint="admin_list_users")
    @roles_required(Role.ADMIN)
    def admin_list_users():
        users = container.user_service.list_staff()
        return jsonify([public_user(u) for u in users])

    @app.route("/api/admin/users", methods=["POST"], endpoint="admin_create_user")
    @roles_required(Role.ADMIN)
    def admin_create_user():
        v = FieldValidator(request.get_json(silent=True))
        name = v.text("name", "Name must be between 2 and 100 characters", min_len=2, max_len=100)
        email = v.email("email", "Please provide a valid email")
        password = v.text("password", "Password must be at least 6 characters", min_len=6)
        role = v.choice("role", Role, "Role must be manager or admin")
        department = v.text("department", "Department is invalid", required=False)
        designation = v.text("designation", "Designation is invalid", required=False)
        v.raise_if_errors()

        user = container.user_service.create_staff(
            name=name,
            email=email,
            password=password,
            role=role,
            department=department,
            designation=designation,
        )
        return jsonify(message="User created successfully", user=public_user(user)), 201

    @app.route("/api/admin/users/<int:user_id>", methods=["PUT"], endpoint="admin_update_user")
    @roles_required(Role.ADMIN)
    def admin_update_user(user_id: int):
        v = FieldValidator(request.get_json(silent=True))
        name = v.text("name", "Name must be between 2 and 100 characters", min_len=2, max_len=100, required=False)
        email = v.email("email", "Please provide a valid email", required=False)
        password = v.text("password", "Password must be at least 6 characters", min_len=6, required=False)
        role = v.choice("role", Role, "Role must be manager or admin", default=None) if v.has("role") else None
        department = v.text("department", "Department is invalid", required=False)
        designation = v.text("designation", "Designation is invalid", required=False)
        v.raise_if_errors()

        user = container.user_service.update_staff(
            user_id=user_id,
            name=name,
            email=email,
            password=password,
            role=role,
            department=department,
            designation=designation,
        )
        return jsonify(message="User updated successfully", user=public_user(user))

    @app.route("/api/admin/users/<int:user_id>/status", methods=["PATCH", "PUT"], endpoint="admin_user_status")
    @roles_required(Role.ADMIN)
    def admin_user_status(user_id: int):
        data = request.get_json(silent=True) or {}
        if not isinstance(data.get("isActive"), bool):
            raise ValidationError(
                "Validation failed",
                errors=[{"field": "isActive", "msg": "isActive must be a boolean", "value": data.get("isActive")}],
            )

        user = container.user_service.set_active(user_id=user_id, is_active=data["isActive"])
        state = "activated" if user.is_active else "disabled"
        return jsonify(message=f"User {state} successfully", user=public_user(user))

    @app.route("/api/admin/users/<int:user_id>", methods=["DELETE"], endpoint="admin_delete_user")
    @roles_required(Role.ADMIN)
    def admin_delete_user(user_id: int):
        container.user_service.delete_user(user_id=user_id)
        return jsonify(message="User deleted successfully")
