# safecheck/server.py
# SafeCheck: Flask backend (check-in timer + Telegram alerts)
import logging
import sys

from flask import Flask, current_app, jsonify, request
from flask_cors import CORS
from pydantic import ValidationError as RequestError

from safecheck.agents.checkin_agent import CheckInTimer
from safecheck.agents.dispatch_agent import AlertDispatcher
from safecheck.agents.notifier_agent import TelegramNotifier
from safecheck.agents.scheduler_agent import SchedulerLoop
from safecheck.config import ConfigError, Settings
from safecheck.models import (
    AlertRequest,
    ContactsRequest,
    DurationRequest,
    READABLE_ERRORS,
    ResetRequest,
    ValidationError,
)
from safecheck.utils.helpers import now_ms

logger = logging.getLogger(__name__)

TIMER_KEY = "safecheck.timer"


def _timer() -> CheckInTimer:
    return current_app.extensions[TIMER_KEY]


def _body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _fmt_num(v):
    return int(v) if float(v).is_integer() else v


# -------------------------------------------------------------------
# App factory
# -------------------------------------------------------------------
def create_app(timer: CheckInTimer) -> Flask:
    app = Flask(__name__)
    app.logger.setLevel(logging.INFO)
    app.extensions[TIMER_KEY] = timer

    CORS(app, send_wildcard=True)

    @app.errorhandler(ValidationError)
    def bad_request(e):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(RequestError)
    def bad_payload(e):
        err = e.errors()[0]
        if err["type"] in READABLE_ERRORS:
            return jsonify({"error": err["msg"]}), 400
        loc = ".".join(str(p) for p in err["loc"])
        return jsonify({"error": f"{loc}: {err['msg']}"}), 400

    # ---------------------------------------------------------------
    # Routes
    # ---------------------------------------------------------------
    @app.get("/api/health")
    def health():
        return jsonify({"status": "OK", "serverTime": now_ms()})

    @app.get("/api/timer")
    def timer_status():
        return jsonify(_timer().status().to_dict())

    # the "I'm Alive!" button
    @app.post("/api/reset-timer")
    def reset_timer():
        req = ResetRequest.model_validate(_body())
        res = _timer().reset(duration=req.duration, reset_by=req.reset_by)
        return jsonify({
            "success": True,
            "deadline": res.deadline,
            "duration": res.duration,
            "message": "Timer reset successfully",
        })

    @app.post("/api/contacts")
    def contacts():
        req = ContactsRequest.model_validate(_body())
        count = _timer().set_contacts(req.contacts)
        return jsonify({"success": True, "count": count})

    @app.post("/api/timer-duration")
    def timer_duration():
        req = DurationRequest.model_validate(_body())
        duration = _timer().set_duration(req.hours, req.minutes, req.seconds)
        h, m, s = (_fmt_num(v) for v in (req.hours, req.minutes, req.seconds))
        return jsonify({
            "success": True,
            "duration": duration,
            "message": f"Timer duration set to {h}h {m}m {s}s",
        })

    # manual emergency alert (bypasses the countdown)
    @app.post("/api/send-alert")
    def send_alert():
        req = AlertRequest.model_validate(_body())
        try:
            result = _timer().alert(req.message)
        except ValidationError:
            raise
        except Exception as e:
            app.logger.exception("Error in /api/send-alert")
            return jsonify({"error": str(e)}), 500
        return jsonify({"success": True, "message": "Alert sent", **result.to_dict()})

    return app


def build_timer(settings: Settings) -> CheckInTimer:
    notifier = TelegramNotifier(settings.telegram_token, timeout=settings.telegram_timeout_s)
    dispatcher = AlertDispatcher(notifier, max_workers=settings.dispatch_workers)
    return CheckInTimer(
        dispatcher,
        timer_duration=settings.default_duration_ms,
        alert_message=settings.alert_message,
        settle_delay_s=settings.settle_delay_s,
    )


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        logger.error("❌ %s", e)
        sys.exit(1)
    logging.getLogger().setLevel(settings.log_level)

    timer = build_timer(settings)
    if settings.arm_on_start:
        timer.arm()

    app = create_app(timer)
    scheduler = SchedulerLoop(timer, interval_s=settings.check_interval_s)
    scheduler.start()

    logger.info("🚀 Safety Alert Server running on %s:%s", settings.host, settings.port)
    try:
        app.run(host=settings.host, port=settings.port, debug=False, use_reloader=False)
    finally:
        scheduler.stop()


if __name__ == "__main__":
    main()
