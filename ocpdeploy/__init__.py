"""Deploy WildFly applications to OpenShift from a local build output directory."""

__version__ = "0.1.0"
