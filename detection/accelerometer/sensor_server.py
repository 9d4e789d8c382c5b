import threading
import time
import logging
from flask import Flask, render_template, request
from flask_socketio import SocketIO, emit
import os
from pyngrok import ngrok
import qrcode

from detection.accelerometer.sensor_driver import to_triaxial_sample
from detection.detection_config import SENSOR_DATA_RATE_HZ


class SensorServer:
    """Flask-SocketIO server receiving accelerometer batches from a smartphone"""

    def __init__(self, sensor_data_callback, counter_state_provider, config, recording_manager=None):
        """
        Initialize sensor server

        Args:
            sensor_data_callback: Called with (readings, timestamp) for every received batch,
                returns the driver queue size
            counter_state_provider: Function that returns the current counter state dict
            config: Configuration object with server settings
            recording_manager: Optional RecordingManager instance for ground truth logging
        """
        self.sensor_data_callback = sensor_data_callback
        self.counter_state_provider = counter_state_provider
        self.config = config
        self.recording_manager = recording_manager

        self.app = Flask(__name__, template_folder=os.path.join(os.path.dirname(__file__), '../../templates'))
        werkzeug_logger = logging.getLogger('werkzeug')
        werkzeug_logger.setLevel(logging.ERROR)

        self.app.config['SECRET_KEY'] = config.FLASK_SECRET_KEY
        self.app.logger.disabled = True

        self.socketio = SocketIO(self.app, cors_allowed_origins="*", logger=False, engineio_logger=False)

        self.connected_clients = set()
        self.readings_received = 0

        self._setup_routes()
        self._setup_socket_handlers()

        self.server_thread = None
        self.ngrok_tunnel = None
        self.public_url = None

    def _setup_routes(self):
        """Setup Flask routes"""
        @self.app.route('/')
        def index():
            return render_template('index.html', sample_rate_hz=SENSOR_DATA_RATE_HZ)

    def _status_payload(self):
        state = self.counter_state_provider()
        return {
            'connected': True,
            'steps': state.get('steps', 0),
            'previous_day_steps': state.get('previous_day_steps', 0)
        }

    def _setup_socket_handlers(self):
        """Setup SocketIO event handlers"""

        @self.socketio.on('connect')
        def handle_connect():
            print(f"Client connected: {request.sid}")
            self.connected_clients.add(request.sid)
            emit('status', self._status_payload())

        @self.socketio.on('disconnect')
        def handle_disconnect():
            print(f"Client disconnected: {request.sid}")
            self.connected_clients.discard(request.sid)

        @self.socketio.on('sensor_data')
        def handle_sensor_data(data):
            try:
                readings = self.parse_readings(data)
                if not readings:
                    emit('sensor_ack', {'status': 'error', 'message': 'No readings'})
                    return

                timestamp = data.get('timestamp', time.time() * 1000)
                queue_size = self.sensor_data_callback(readings, timestamp)
                self.readings_received += len(readings)
                emit('sensor_ack', {'status': 'ok', 'received': len(readings), 'queue_size': queue_size})
            except ValueError as e:
                print(f"Error receiving sensor data: {e}")
                emit('sensor_ack', {'status': 'error', 'message': str(e)})

        @self.socketio.on('ground_truth')
        def handle_ground_truth(data=None):
            server_timestamp = time.time()
            if self.recording_manager:
                recorded = self.recording_manager.record_ground_truth(server_timestamp=server_timestamp)
                emit('ground_truth_ack', {'status': 'ok' if recorded else 'not_recording'})
            else:
                emit('ground_truth_ack', {'status': 'error', 'message': 'Recording not available'})

        @self.socketio.on('get_status')
        def handle_get_status():
            emit('status', self._status_payload())

    @staticmethod
    def parse_readings(data):
        """
        Extract raw readings from a 'sensor_data' payload.

        Accepts either a batch ({'readings': [{x, y, z}, ...]}) or a single
        reading ({x, y, z}), in m/s².

        Returns:
            list: TriaxialSample readings in raw sensor units
        """
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected sensor payload: {data!r}")
        if 'readings' in data:
            if not isinstance(data['readings'], list):
                raise ValueError(f"Readings must be a list: {data['readings']!r}")
            return [to_triaxial_sample(reading) for reading in data['readings']]
        if all(axis in data for axis in ('x', 'y', 'z')):
            return [to_triaxial_sample(data)]
        return []

    def _setup_ngrok(self):
        """Setup ngrok tunnel if enabled and auth token is available"""
        if not getattr(self.config, 'ENABLE_NGROK', True):
            return None

        auth_token = getattr(self.config, 'NGROK_AUTH_TOKEN', None)
        if not auth_token:
            print("Warning: NGROK_AUTH_TOKEN not set. Ngrok tunneling disabled.")
            print("Add NGROK_AUTH_TOKEN=your_token_here to .env to reach the counter from your phone")
            return None

        try:
            ngrok.set_auth_token(auth_token)
            tunnel = ngrok.connect(self.config.SERVER_PORT)
            self.public_url = tunnel.public_url
            print(f"Ngrok tunnel established: {self.public_url}")
            self._display_qr_code(self.public_url)
            return tunnel

        except Exception as e:
            print(f"Failed to setup ngrok tunnel: {e}")
            print("Continuing with local server only...")
            return None

    def _display_qr_code(self, url):
        """Print a QR code for the URL to the console"""
        try:
            qr = qrcode.QRCode(
                version=1,
                error_correction=qrcode.constants.ERROR_CORRECT_L,
                box_size=10,
                border=4,
            )
            qr.add_data(url)
            qr.make(fit=True)
            qr.print_ascii(invert=True)
            print(f"\nScan the QR code above with the phone you are carrying!")
            print(f"Or visit: {url}")

        except Exception as e:
            print(f"Failed to generate QR code: {e}")

    def start(self):
        """Start the sensor server in a background thread"""
        def run_server():
            self.socketio.run(
                self.app,
                host=self.config.SERVER_HOST,
                port=self.config.SERVER_PORT,
                debug=False,
                allow_unsafe_werkzeug=True
            )

        self.ngrok_tunnel = self._setup_ngrok()

        self.server_thread = threading.Thread(target=run_server, daemon=True)
        self.server_thread.start()

        print(f"Sensor server started on {self.get_local_url()}")
        if self.public_url:
            print(f"Public URL (via ngrok): {self.public_url}")

    def emit_step_update(self, counter_state):
        """Broadcast the step count to all connected clients"""
        self.socketio.emit('step_update', {
            'steps': counter_state.get('steps', 0),
            'previous_day_steps': counter_state.get('previous_day_steps', 0),
            'new_steps': counter_state.get('new_steps', 0)
        })

    def is_running(self):
        return self.server_thread is not None and self.server_thread.is_alive()

    def stop(self):
        """Close the ngrok tunnel; the server thread is a daemon and exits with the app"""
        if self.ngrok_tunnel:
            try:
                ngrok.disconnect(self.ngrok_tunnel.public_url)
                print("Ngrok tunnel closed")
            except Exception as e:
                print(f"Error closing ngrok tunnel: {e}")
            self.ngrok_tunnel = None

    def get_local_url(self):
        return f"http://{self.config.SERVER_HOST}:{self.config.SERVER_PORT}"

    def has_connected_clients(self):
        return len(self.connected_clients) > 0
