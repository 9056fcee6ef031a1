"""Request and service configuration builders."""
