"""Core playbook modules: models, store, play service, config and errors."""
