import click
from flask.cli import with_appcontext

from itabaza.extensions import db
from itabaza.models.user_models import User, Doctor, Admin, Department
from itabaza.models.appointment_models import Appointment
from itabaza.services.video_rooms import provision_video_room

# Same ids the web frontend maps department names from
DEFAULT_DEPARTMENTS = [
    'Neurology', 'Dermatology', 'Dental', 'Ayurveda', 'Gastroenterology',
    'Gynaecology', 'ENT', 'General Physician', 'Orthopedic', 'Cardiology',
]

ACCOUNT_MODELS = {'patient': User, 'doctor': Doctor, 'admin': Admin}


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create tables and seed the default departments."""
    db.create_all()

    for name in DEFAULT_DEPARTMENTS:
        if not Department.query.filter_by(dept_name=name).first():
            db.session.add(Department(dept_name=name))
            click.echo(f"Added department: {name}")
    db.session.commit()

    click.echo("Database initialized successfully!")


@click.command('create-admin')
@click.option('--name', prompt=True)
@click.option('--email', prompt=True)
@click.password_option()
@with_appcontext
def create_admin_command(name, email, password):
    """Create an admin account."""
    email = User.normalize_email(email)
    if Admin.query.filter_by(email=email).first():
        raise click.ClickException(f"Admin {email} already exists")

    admin = Admin(name=name, email=email)
    try:
        admin.set_password(password)
    except ValueError as e:
        raise click.ClickException(str(e))
    db.session.add(admin)
    db.session.commit()
    click.echo(f"Admin {email} created")


@click.command('assign-video-rooms')
@with_appcontext
def assign_video_rooms_command():
    """Give every video-call appointment without a meeting link its room."""
    pending = Appointment.query.filter(
        Appointment.consultation_type == 'video-call',
        Appointment.video_call_url.is_(None),
    ).order_by(Appointment.id).all()

    for appointment in pending:
        updated = provision_video_room(appointment.to_dict())
        click.echo(f"Appointment {updated['id']}: {updated['video_call_room_name']}")

    click.echo(f"Assigned rooms to {len(pending)} appointment(s)")


@click.command('reset-password')
@click.option('--role', type=click.Choice(sorted(ACCOUNT_MODELS)), default='patient')
@click.option('--email', prompt=True)
@click.password_option()
@with_appcontext
def reset_password_command(role, email, password):
    """Set a new password for a patient, doctor or admin."""
    account = ACCOUNT_MODELS[role].query.filter_by(email=User.normalize_email(email)).first()
    if not account:
        raise click.ClickException(f"No {role} with email {email}")
    try:
        account.set_password(password)
    except ValueError as e:
        raise click.ClickException(str(e))
    db.session.commit()
    click.echo(f"Password updated for {role} {account.email}")


@click.command('send-test-email')
@click.argument('recipient')
@with_appcontext
def send_test_email_command(recipient):
    """Send a sample appointment confirmation to check the mail settings."""
    from itabaza.utils.email_util import send_appointment_confirmation

    sample = {
        'id': 0,
        'patient_id': 0,
        'appointment_date': '2025-01-01',
        'appointment_time': '10:00',
        'consultation_type': 'in-person',
        'problem_description': 'Test email',
        'status': 'confirmed',
        'payment_status': True,
    }
    result = send_appointment_confirmation(recipient, 'Test Patient', 'Test Doctor', sample)
    if not result.success:
        raise click.ClickException(result.message)
    click.echo(result.message)


def register_commands(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(create_admin_command)
    app.cli.add_command(assign_video_rooms_command)
    app.cli.add_command(reset_password_command)
    app.cli.add_command(send_test_email_command)
