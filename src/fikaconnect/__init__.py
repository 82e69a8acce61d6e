"""FikaConnect delivery quoting and group matching service."""
