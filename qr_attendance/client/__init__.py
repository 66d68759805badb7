"""Command line console and camera scanner for the QR Attendance API."""
