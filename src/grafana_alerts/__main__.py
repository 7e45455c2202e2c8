from grafana_alerts.cli import entrypoint

entrypoint()
