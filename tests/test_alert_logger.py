"""Alert log formatting."""

import logging

from chainwatch.alerting import AlertFormatter, AlertLogger
from test_repository import dump_alert, whale_alert


def record_for(alert):
    record = logging.LogRecord("chainwatch.alerts", logging.WARNING, "", 0, "Alert", (), None)
    record.alert = alert
    return record


def test_whale_alert_block():
    text = AlertFormatter().format(record_for(whale_alert()))

    assert "WHALE ALERT | HIGH" in text
    assert "$12,500,000.00" in text
    assert "0xabc" in text


def test_dump_alert_block():
    text = AlertFormatter().format(record_for(dump_alert()))

    assert "DUMP ALERT | HIGH" in text
    assert "-22.50% (10m)" in text


def test_alert_logger_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "alerts.log"
    alert_logger = AlertLogger(log_file)
    alert_logger.log_alert(whale_alert())
    alert_logger.close()

    assert "WHALE ALERT" in log_file.read_text()
