from flask import request
from sqlalchemy.exc import IntegrityError

from itabaza.extensions import db
from itabaza.models.user_models import Department
from itabaza.utils.responses import success_response, error_response


def get_departments():
    departments = Department.query.order_by(Department.id).all()
    return success_response([d.to_dict() for d in departments])


def get_department(department_id):
    department = db.session.get(Department, department_id)
    if not department:
        return error_response('Department not found', 404)
    return success_response(department.to_dict())


def add_department():
    data = request.get_json(silent=True) or {}
    if not data.get('dept_name'):
        return error_response('dept_name is required', 400)

    department = Department(
        dept_name=data['dept_name'],
        about=data.get('about'),
        image=data.get('image'),
    )
    try:
        db.session.add(department)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return error_response('Department already exists', 409)
    return success_response(department.to_dict(), message='Department created', status=201)
