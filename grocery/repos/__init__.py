# every repository relies on the row policy listeners being installed
import grocery.security.policies  # noqa: F401
