"""Application entry point."""
import errno
import os
import socket

import click
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from qr_attendance import create_app, db  # noqa: E402

# Create Flask app
app = create_app(os.getenv('FLASK_ENV', 'development'))

def find_available_port(host: str, port: int, attempts: int = 50) -> int:
    """First port at or above ``port`` that can be bound on ``host``."""
    for candidate in range(port, port + attempts):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            try:
                sock.bind((host, candidate))
            except OSError as e:
                if e.errno != errno.EADDRINUSE:
                    raise
                app.logger.warning('Port %d is in use, trying %d', candidate, candidate + 1)
                continue
            return candidate
    raise RuntimeError(f'No free port found in {port}-{port + attempts - 1}')

@app.cli.command('reset-db')
def reset_db():
    """Reset database completely."""
    if click.confirm('This will delete all data and recreate tables. Continue?'):
        db.drop_all()
        db.create_all()
        click.echo('Database reset complete!')

if __name__ == '__main__':
    # Development server
    host = os.environ.get('HOST', '127.0.0.1')
    port = int(os.environ.get('PORT', 5000))
    if not os.environ.get('WERKZEUG_RUN_MAIN'):
        # The reloader child inherits the socket bound by its parent
        port = find_available_port(host, port)
    debug = os.environ.get('FLASK_ENV') == 'development'
    
    with app.app_context():
        db.create_all()
    
    app.logger.info('Server running on port %d', port)
    app.run(host=host, port=port, debug=debug)
