"""``qr-attendance`` console commands against the in-process API."""
import pytest
from click.testing import CliRunner

from qr_attendance.client import cli as cli_module
from qr_attendance.client.api_client import ApiClient
from qr_attendance.client.cli import cli
from qr_attendance.models.attendee import Attendee

@pytest.fixture
def run(monkeypatch, flask_http, tmp_path):
    """Invoke the console with its HTTP calls routed to the test app."""
    monkeypatch.setattr(
        cli_module, 'ApiClient',
        lambda url, session=None: ApiClient('http://testserver', session=session, http=flask_http)
    )
    session_file = str(tmp_path / 'session.json')
    runner = CliRunner()

    def invoke(*args, **kwargs):
        return runner.invoke(cli, ['--session-file', session_file, *args], **kwargs)
    invoke.session_file = session_file
    return invoke

@pytest.fixture
def logged_in(run, admin_user):
    result = run('login', '--username', 'admin', '--password', 'admin123')
    assert result.exit_code == 0, result.output
    return run

def test_login_and_logout(run, admin_user):
    result = run('login', '--username', 'admin', '--password', 'admin123')

    assert result.exit_code == 0
    assert 'Logged in as admin (admin)' in result.output
    assert run('whoami').output.strip() == 'admin (admin)'

    assert run('logout').exit_code == 0
    result = run('whoami')
    assert result.exit_code == 1
    assert 'No token' in result.output

def test_login_failure(run, admin_user):
    result = run('login', '--username', 'admin', '--password', 'wrong')

    assert result.exit_code == 1
    assert 'Invalid credentials' in result.output

def test_add_list_and_show_attendee(logged_in):
    result = logged_in('add-attendee', '--name', 'Jane Doe', '--reg-no', 'U100',
                       '--branch', 'CSE', '--qr-code', 'ABC123')
    assert result.exit_code == 0, result.output
    assert 'QR ABC123' in result.output

    result = logged_in('attendees', '--search', 'u100')
    assert 'Jane Doe' in result.output

    attendee_id = Attendee.query.filter_by(university_reg_no='U100').one().id
    result = logged_in('show', str(attendee_id))
    assert 'Jane Doe (U100, CSE)' in result.output
    assert '(none)' in result.output

def test_add_attendee_generates_qr_code(logged_in):
    result = logged_in('add-attendee', '--name', 'Jane Doe', '--reg-no', 'U100',
                       '--branch', 'CSE', '--qr-code', '')

    assert result.exit_code == 0, result.output
    assert len(Attendee.query.filter_by(university_reg_no='U100').one().qrcode_number) == 12

def test_mark_and_reports(logged_in, make_attendee):
    make_attendee()

    result = logged_in('mark', 'ABC123', '--type', 'in')
    assert result.exit_code == 0, result.output
    assert 'Jane Doe: arrival recorded' in result.output

    result = logged_in('mark', 'ABC123', '--type', 'in')
    assert result.exit_code == 1
    assert 'Attendance already marked for arrival' in result.output

    result = logged_in('stats')
    assert 'Events today:      1' in result.output
    assert 'Arrivals today: 1' in result.output

    result = logged_in('history')
    assert 'U100' in result.output

def test_delete_attendee(logged_in, make_attendee):
    jane = make_attendee()

    result = logged_in('delete-attendee', str(jane.id), '--yes')

    assert result.exit_code == 0, result.output
    assert 'Deleted Jane Doe and 0 records' in result.output
    assert Attendee.query.count() == 0

def test_qrcode_download(logged_in, make_attendee, tmp_path):
    jane = make_attendee()
    output = tmp_path / 'badge.png'

    result = logged_in('qrcode', str(jane.id), '-o', str(output))

    assert result.exit_code == 0, result.output
    assert output.read_bytes().startswith(b'\x89PNG')

def test_import(logged_in, tmp_path):
    path = tmp_path / 'attendees.csv'
    path.write_text(
        'Full Name,University Registration No,Branch,qrcodeNumber\n'
        'Jane Doe,U100,CSE,QR-A\n'
        'John Roe,U200,ECE,QR-B\n'
    )

    result = logged_in('import', str(path))

    assert result.exit_code == 0, result.output
    assert 'Processed 2 rows: 2 created, 0 updated, 0 skipped' in result.output

def test_admin_commands_refused_for_operators(run, regular_user):
    run('login', '--username', 'scanner', '--password', 'scanner123')

    result = run('users')

    assert result.exit_code == 1
    assert 'Admin access required' in result.output
