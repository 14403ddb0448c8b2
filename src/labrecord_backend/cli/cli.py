import functools
import logging
import click
from fastapi import HTTPException
from labrecord_backend.database import _SessionLocal, upgrade_database
from labrecord_backend.interface.identity import PrincipalCreatedEvent, PrincipalMetadata
from labrecord_backend.model.auth import DEPARTMENTS, ROLES
from labrecord_backend.model.seeder import seed_subjects
from labrecord_backend.settings import settings
from labrecord_backend.workflow.provisioning import assign_faculty, enroll_student, provision_principal


def handle_api_exceptions(func):
  @functools.wraps(func)
  def wrapper(*args, **kwargs):
    try:
      return func(*args, **kwargs)
    except HTTPException as e:
      raise click.ClickException(f"[{e.status_code}] {e.detail}")

  return wrapper

@click.command()
def init_db():
  upgrade_database()
  click.echo("Database schema is up to date.")

@click.command()
def seed():
  with _SessionLocal() as db:
    created = seed_subjects(db)
  click.echo(f"Created {created} subjects.")

@click.command()
@click.argument("principal_id")
@click.option("--name", "-n", "full_name", default=None)
@click.option("--role", "-r", type=click.Choice(ROLES), default=None)
@click.option("--department", "-d", type=click.Choice(DEPARTMENTS), default=None)
@handle_api_exceptions
def provision(principal_id, full_name, role, department):

  event = PrincipalCreatedEvent(
    id=principal_id,
    metadata=PrincipalMetadata(full_name=full_name, role=role, department=department)
  )

  with _SessionLocal() as db:
    profile = provision_principal(db, event)
    click.echo(f"Provisioned {click.style(profile.role, fg='green')} {profile.id}")

@click.command()
@click.argument("faculty_id")
@click.argument("subject_code")
@handle_api_exceptions
def assign(faculty_id, subject_code):
  with _SessionLocal() as db:
    assign_faculty(db, faculty_id, subject_code)
  click.echo(f"Assigned {faculty_id} to {subject_code}")

@click.command()
@click.argument("student_id")
@click.argument("subject_code")
@handle_api_exceptions
def enroll(student_id, subject_code):
  with _SessionLocal() as db:
    enroll_student(db, student_id, subject_code)
  click.echo(f"Enrolled {student_id} in {subject_code}")

@click.group()
def cli():
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s [%(name)s] %(message)s")

cli.add_command(init_db,"init-db")
cli.add_command(seed,"seed-subjects")
cli.add_command(provision,"provision")
cli.add_command(assign,"assign")
cli.add_command(enroll,"enroll")

if __name__ == '__main__':
    cli()
