"""Flask CLI maintenance commands."""
from qr_attendance.models.attendee import Attendee
from qr_attendance.models.user import User, UserRole

def test_init_db(app):
    result = app.test_cli_runner().invoke(args=['init-db', '--drop'])

    assert 'Dropped all tables.' in result.output
    assert 'Created all tables.' in result.output

def test_create_admin(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['create-admin', '--username', 'root', '--email', '',
                                 '--password', 'secret12'])

    assert 'Admin user created: root' in result.output
    user = User.query.filter_by(username='root').one()
    assert user.role == UserRole.ADMIN
    assert user.check_password('secret12')

    result = runner.invoke(args=['create-admin', '--username', 'root', '--email', '',
                                 '--password', 'secret12'])
    assert 'Error creating admin: User already exists' in result.output

def test_seed_db(app):
    result = app.test_cli_runner().invoke(args=['seed-db', '--count', '5'])

    assert 'Database seeded with 5 attendees.' in result.output
    attendees = Attendee.query.all()
    assert len(attendees) == 5
    assert len({a.qrcode_number for a in attendees}) == 5
    assert all(len(a.qrcode_number) == 12 for a in attendees)

def test_seed_db_skips_taken_registration_numbers(app, make_attendee):
    make_attendee(reg_no='U0002', qr='TAKEN1')
    make_attendee(reg_no='U0003', qr='TAKEN2', name='John Roe')

    result = app.test_cli_runner().invoke(args=['seed-db', '--count', '3'])

    assert 'Database seeded with 3 attendees.' in result.output
    assert Attendee.query.count() == 5
    assert Attendee.query.filter_by(university_reg_no='U0003').one().qrcode_number == 'TAKEN2'
