"""``qr-attendance`` admin console.

Every command talks to the HTTP API; ``login`` stores the session used by the
following commands and ``logout`` discards it.
"""
import logging
import sys
from functools import wraps

import click

from qr_attendance.client.api_client import ApiClient, ApiError
from qr_attendance.client.session import SessionStore
from qr_attendance.utils.helpers import generate_qr_token

class Console:
    """Objects shared by every command of one invocation."""

    def __init__(self, api_url, session_file):
        self.store = SessionStore(session_file)
        self.client = ApiClient(api_url, session=self.store.load())

def api_command(f):
    """Pass the console to the command and report API errors as click failures."""
    @click.pass_obj
    @wraps(f)
    def wrapper(console, *args, **kwargs):
        try:
            return f(console, *args, **kwargs)
        except ApiError as e:
            if e.status == 401 and console.client.session:
                raise click.ClickException(f"{e.message}. Run 'qr-attendance login' again.")
            raise click.ClickException(str(e))
    return wrapper

def echo_table(rows, columns):
    """Print ``rows`` (dicts) as a fixed-width table."""
    if not rows:
        click.echo('(none)')
        return

    widths = {
        key: max(len(title), *(len(str(row.get(key, '') or '')) for row in rows))
        for key, title in columns
    }
    click.echo('  '.join(title.ljust(widths[key]) for key, title in columns))
    click.echo('  '.join('-' * widths[key] for key, _ in columns))
    for row in rows:
        click.echo('  '.join(str(row.get(key, '') or '').ljust(widths[key]) for key, _ in columns))

@click.group()
@click.option('--api-url', envvar='QR_ATTENDANCE_API_URL', default=None,
              help='API base URL (default http://localhost:5000).')
@click.option('--session-file', envvar='QR_ATTENDANCE_SESSION', default=None,
              help='Where the login session is kept.')
@click.option('-v', '--verbose', is_flag=True, help='Log HTTP and scanner activity.')
@click.pass_context
def cli(ctx, api_url, session_file, verbose):
    """QR attendance admin console."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s: %(message)s'
    )
    ctx.obj = Console(api_url, session_file)

# =================== SESSION ===================

@cli.command()
@click.option('--username', prompt=True)
@click.password_option(confirmation_prompt=False)
@api_command
def login(console, username, password):
    """Sign in and remember the session."""
    session = console.client.login(username, password)
    console.store.save(session)
    click.echo(f"Logged in as {session.username} ({session.user.get('role')})")

@cli.command()
@click.pass_obj
def logout(console):
    """Forget the stored session."""
    console.client.logout()
    console.store.clear()
    click.echo('Logged out')

@cli.command()
@api_command
def whoami(console):
    """Show the operator the stored token belongs to."""
    user = console.client.verify()
    click.echo(f"{user['username']} ({user['role']})")

@cli.command('users')
@api_command
def list_users(console):
    """List operator accounts (admin)."""
    echo_table(console.client.list_users(), [
        ('id', 'ID'), ('username', 'Username'), ('email', 'Email'), ('role', 'Role')
    ])

@cli.command('register-user')
@click.option('--username', prompt=True)
@click.password_option()
@click.option('--email', default=None)
@click.option('--role', type=click.Choice(['user', 'admin']), default='user', show_default=True)
@api_command
def register_user(console, username, password, email, role):
    """Create an operator account (admin)."""
    user = console.client.register_user(username, password, email=email, role=role)
    click.echo(f"Created {user['role']} account {user['username']}")

# =================== ATTENDEES ===================

@cli.command('attendees')
@click.option('--search', default=None, help='Filter by name or registration number.')
@api_command
def list_attendees(console, search):
    """List attendees."""
    attendees = console.client.list_attendees()
    if search:
        needle = search.lower()
        attendees = [
            a for a in attendees
            if needle in a['fullName'].lower() or needle in a['universityRegNo'].lower()
        ]

    echo_table(attendees, [
        ('id', 'ID'), ('fullName', 'Name'), ('universityRegNo', 'Reg No'),
        ('branch', 'Branch'), ('qrcodeNumber', 'QR Code')
    ])

@cli.command('show')
@click.argument('attendee_id', type=int)
@api_command
def show_attendee(console, attendee_id):
    """Show an attendee and its recent attendance records."""
    details = console.client.get_attendee(attendee_id)
    attendee = details['attendee']

    click.echo(f"{attendee['fullName']} ({attendee['universityRegNo']}, {attendee['branch']})")
    click.echo(f"QR code: {attendee['qrcodeNumber']}")
    if attendee.get('email'):
        click.echo(f"Email:   {attendee['email']}")
    if attendee.get('mobileNo'):
        click.echo(f"Mobile:  {attendee['mobileNo']}")
    click.echo('')
    echo_table(details['attendanceRecords'], [('id', 'Record'), ('type', 'Type'), ('date', 'Date')])

def _attendee_options(f):
    for option in reversed([
        click.option('--name', 'full_name', prompt='Full name'),
        click.option('--reg-no', prompt='Registration number'),
        click.option('--branch', prompt='Branch'),
        click.option('--qr-code', prompt='QR code (blank to generate)', default='', show_default=False),
        click.option('--email', default=None),
        click.option('--mobile', default=None),
    ]):
        f = option(f)
    return f

def _attendee_payload(full_name, reg_no, branch, qr_code, email, mobile):
    return {
        'fullName': full_name,
        'universityRegNo': reg_no,
        'branch': branch,
        'qrcodeNumber': qr_code or generate_qr_token(),
        'email': email,
        'mobileNo': mobile
    }

@cli.command('add-attendee')
@_attendee_options
@api_command
def add_attendee(console, full_name, reg_no, branch, qr_code, email, mobile):
    """Add an attendee (or refresh the QR code of an existing registration number)."""
    payload = _attendee_payload(full_name, reg_no, branch, qr_code, email, mobile)
    attendee = console.client.create_attendee(payload)
    click.echo(f"{attendee['fullName']} ({attendee['universityRegNo']}) -> QR {attendee['qrcodeNumber']}")

@cli.command('update-attendee')
@click.argument('attendee_id', type=int)
@_attendee_options
@api_command
def update_attendee(console, attendee_id, full_name, reg_no, branch, qr_code, email, mobile):
    """Replace an attendee's details."""
    payload = _attendee_payload(full_name, reg_no, branch, qr_code, email, mobile)
    attendee = console.client.update_attendee(attendee_id, payload)
    click.echo(f"Updated {attendee['fullName']} ({attendee['universityRegNo']})")

@cli.command('delete-attendee')
@click.argument('attendee_id', type=int)
@click.confirmation_option(prompt='Delete the attendee and all of its attendance records?')
@api_command
def delete_attendee(console, attendee_id):
    """Delete an attendee and its attendance records."""
    attendee = console.client.delete_attendee(attendee_id)
    click.echo(f"Deleted {attendee['fullName']} and {attendee.get('deletedRecords', 0)} records")

@cli.command('delete-record')
@click.argument('record_id', type=int)
@api_command
def delete_record(console, record_id):
    """Delete a single attendance record."""
    console.client.delete_record(record_id)
    click.echo(f"Deleted record {record_id}")

@cli.command('qrcode')
@click.argument('attendee_id', type=int)
@click.option('-o', '--output', type=click.Path(dir_okay=False, writable=True), default=None,
              help='PNG file to write (default QR_<regNo>.png).')
@api_command
def qrcode_png(console, attendee_id, output):
    """Download an attendee's QR code as PNG."""
    if not output:
        attendee = console.client.get_attendee(attendee_id)['attendee']
        output = f"QR_{attendee['universityRegNo']}.png"

    with open(output, 'wb') as fh:
        fh.write(console.client.attendee_qrcode(attendee_id))
    click.echo(f"Saved {output}")

# =================== IMPORT ===================

@cli.command('import')
@click.argument('csv_file', type=click.Path(exists=True, dir_okay=False))
@api_command
def import_csv(console, csv_file):
    """Import attendees from a CSV file (admin)."""
    result = console.client.import_csv(csv_file)
    click.echo(
        f"Processed {result['count']} rows: {result.get('created', 0)} created, "
        f"{result.get('updated', 0)} updated, {result.get('skipped', 0)} skipped"
    )

@cli.command('template')
@click.option('-o', '--output', type=click.Path(dir_okay=False, writable=True), default=None)
@api_command
def import_template(console, output):
    """Print or save the CSV import template."""
    template = console.client.import_template()
    if output:
        with open(output, 'w', encoding='utf-8') as fh:
            fh.write(template)
        click.echo(f"Saved {output}")
    else:
        click.echo(template, nl=False)

# =================== REPORTS ===================

@cli.command()
@api_command
def stats(console):
    """Attendance dashboard."""
    data = console.client.stats()

    click.echo(f"Attendees:         {data['totalUsers']}")
    click.echo(f"Events today:      {data['todayAttendance']}")
    click.echo(f"Events all time:   {data['totalAttendance']}")
    click.echo('')
    echo_table(data['branchStats'], [('branch', 'Branch'), ('count', 'Attendees')])

    for group in data['todayDetails']:
        label = 'Arrivals' if group['type'] == 'in' else 'Departures'
        click.echo('')
        click.echo(f"{label} today: {group['count']}")
        echo_table(group['students'], [
            ('time', 'Time'), ('name', 'Name'), ('regNo', 'Reg No'), ('branch', 'Branch')
        ])

@cli.command()
@click.option('--limit', type=int, default=None, help='Show only the newest N events.')
@api_command
def history(console, limit):
    """Latest attendance events."""
    events = console.client.history()
    if limit:
        events = events[:limit]

    rows = [{
        'id': event['id'],
        'date': event['date'],
        'type': event['type'],
        'name': (event.get('attendee') or {}).get('fullName'),
        'regNo': (event.get('attendee') or {}).get('universityRegNo'),
        'branch': (event.get('attendee') or {}).get('branch')
    } for event in events]
    echo_table(rows, [
        ('id', 'Record'), ('date', 'Date'), ('type', 'Type'),
        ('name', 'Name'), ('regNo', 'Reg No'), ('branch', 'Branch')
    ])

# =================== SCANNING ===================

def _type_option(f):
    return click.option('--type', 'event_type', type=click.Choice(['in', 'out']), default='in',
                        show_default=True, help='Check in (arrival) or check out (departure).')(f)

@cli.command()
@click.argument('qr_code')
@_type_option
@api_command
def mark(console, qr_code, event_type):
    """Mark attendance for a QR code typed or pasted by hand."""
    result = console.client.mark(qr_code, event_type)
    click.echo(f"{result['attendee']['name']}: {'arrival' if event_type == 'in' else 'departure'} recorded")

@cli.command()
@_type_option
@click.option('--camera', type=int, default=0, show_default=True, help='Camera index.')
@click.option('--interval', type=float, default=0.5, show_default=True, help='Seconds between frames.')
@click.option('--debounce', type=float, default=2.0, show_default=True,
              help='Seconds a just-scanned code is ignored.')
@click.option('--once', is_flag=True, help='Stop after the first successful mark.')
@click.option('--image', type=click.Path(exists=True, dir_okay=False), default=None,
              help='Decode a photo instead of using the camera.')
@api_command
def scan(console, event_type, camera, interval, debounce, once, image):
    """Scan QR codes with a camera and mark attendance."""
    from qr_attendance.client.scanner import CameraTokenSource, ScanLoop, decode_image

    def report(outcome):
        if outcome.ok:
            click.secho(f"[OK] {outcome.name}: {outcome.message}", fg='green')
        else:
            click.secho(f"[!!] {outcome.token}: {outcome.message}", fg='red')

    loop = ScanLoop(console.client, event_type, debounce=debounce, on_outcome=report)

    if image:
        token = decode_image(image)
        if not token:
            raise click.ClickException(f"No QR code found in {image}")
        outcome = loop.handle(token)
        sys.exit(0 if outcome and outcome.ok else 1)

    click.echo(f"Scanning for {'arrivals' if event_type == 'in' else 'departures'}. Press Ctrl+C to stop.")
    try:
        marked = loop.run(CameraTokenSource(camera, interval=interval), stop_after_success=once)
    except KeyboardInterrupt:
        loop.stop()
        marked = None
    except RuntimeError as e:
        raise click.ClickException(str(e))

    if marked is not None:
        click.echo(f"Stopped after {marked} successful scans")

if __name__ == '__main__':
    cli()
