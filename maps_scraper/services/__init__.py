"""Engine collaborator services package.

Contains the record store, the status channels carrying push notifications,
the record exporter and the headless browser host for the live maps page.
"""
