"""PR ticket linker service."""
