"""SQLite data access for employees, snapshots and movement history."""
