"""Session shell: configuration store, dialog sequencing and presenters."""
