# speak-to-ai

The core of a speech-to-text daemon for Linux desktops. Recorded speech in a
WAV file is handed to a speech model, and the transcript goes to the active
window or the clipboard. A WebSocket API lets other programs start and stop
recording and receive transcripts.

## Modules

- `speak_to_ai.config`: configuration dataclasses. `Config` holds
  `GeneralSettings`, `HotkeySettings`, `AudioSettings`, `OutputSettings` and
  `WebServerSettings`.
- `speak_to_ai.logger`: `LogLevel` (`DEBUG`, `INFO`, `WARNING`, `ERROR`),
  `LoggerConfig`, the `Logger` protocol and `DefaultLogger`, whose `debug`,
  `info`, `warning` and `error` take printf-style arguments and drop messages
  below the logger's level. `configure(config)` sends output to stderr, or
  appends it to `config.file`, and returns a `DefaultLogger`.
- `speak_to_ai.platform`: `detect_environment()` returns
  `Environment.WAYLAND` when `WAYLAND_DISPLAY` is set, `Environment.X11` when
  `DISPLAY` is set, otherwise `Environment.UNKNOWN`. Also `utility_exists`,
  `check_privileges` (true as root) and `ensure_directory_exists`.
- `speak_to_ai.notify`: `NotificationManager` sends desktop notifications
  through `notify-send`; failures raise `NotificationError`.
- `speak_to_ai.tray`: the abstract `TrayManager` interface (`start`,
  `set_recording_state`, `set_tooltip`, `update_settings`, `stop`) and the
  embedded microphone icons, `get_icon_mic_off()` and `get_icon_mic_on()`,
  decoded by `decode_icon`.
- `speak_to_ai.outputs`: `ClipboardOutputter` (`xclip`, `wl-copy`),
  `TypeOutputter` (`xdotool`) and `CombinedOutputter`. Errors raise
  `OutputError`.
- `speak_to_ai.output_factory`: `OutputFactory` and
  `get_outputter_from_config(config, env)`.
- `speak_to_ai.ws_auth`: `authenticate`, `validate_token` and
  `get_client_ip`.
- `speak_to_ai.retry`: `RetryTracker`, which retries an operation up to three
  times per key with a delay growing by half a second each time, and
  `get_retry_backoff(attempt)`.
- `speak_to_ai.server`: `Message` and the aiohttp-based `WebSocketServer`.
- `speak_to_ai.engine`: `WhisperEngine`, `SpeechModel`, `load_audio_data` and
  file helpers.
- `speak_to_ai.model_manager`: `ModelManager` for finding, downloading and
  checking model files.
- `speak_to_ai.app`: `App`, which ties the components together.

## Output tools

With `auto` as the clipboard or typing tool, `OutputFactory.resolve_tools`
picks the tool from the display server:

| Environment | Clipboard | Typing        |
|-------------|-----------|---------------|
| X11         | `xclip`   | `xdotool`     |
| Wayland     | `wl-copy` | `wl-keyboard` |
| Unknown     | `xclip`   | `xdotool`     |

The output mode (`config.output.default_mode`) is `clipboard`,
`active_window` or `combined`; any other value is treated as `combined`.
Creating an outputter raises `OutputError` when a chosen tool is not on
`PATH`. `TypeOutputter` only types with `xdotool`, so `wl-keyboard` is found
but refused when typing.

## WebSocket API

`WebSocketServer(config, recorder, whisper, logger)` serves `/ws`, also
`/api/<version>/ws` when `config.web_server.api_version` is set, and
`/health`, which answers `{"status":"ok"}`. `start()` and `stop()` are
coroutines; `start()` does nothing unless `config.web_server.enabled` is true.

Messages are JSON objects with a `type` and optional `payload`,
`api_version`, `request_id`, `timestamp` and `error` fields; empty fields are
left out. Clients send `start-recording`, `stop-recording` or `ping`. On
connecting a client receives `connected`; afterwards the server answers with
`recording-started`, `recording-stopped`, `transcription` (payload
`{"text": ...}`), `pong` or `error` (with `invalid_message`, `unknown_type`,
`recording_error`, `transcription_error` or `transcription_timeout`).
Transcription gives up after 30 seconds by default.

When `config.web_server.auth_token` is set, a client passes it as the `token`
query parameter or as an `Authorization: Bearer token` header; others get 401.
When `max_clients` is above zero and reached, new connections get 503.

```python
from speak_to_ai.ws_auth import validate_token, get_client_ip

validate_token("token", "  token  ")   # True: surrounding whitespace is ignored
validate_token("", "token")            # False: no token configured
get_client_ip({"X-Forwarded-For": "192.168.1.1,10.0.0.1"}, "")  # "192.168.1.1"
```

## Transcription and models

`WhisperEngine(config, model_path, loader=...)` needs a `loader`, a callable
that takes the model path and returns a `SpeechModel`; the package ships no
model backend of its own. `transcribe(audio_file)` reads a PCM WAV file of at
most 50 MiB, requires 100 MiB free beside it, scales samples by 1/32768,
passes `config.general.language` to the model unless it is empty or `auto`,
and joins the segments into one trimmed string. Failures raise
`TranscriptionError`.

`ModelManager` looks for `config.general.model_path`, then for
`ggml-model-<type>.<precision>.bin` (see `model_file_name`) in the model
directory (`models` by default). A missing model is downloaded from the base
URL given as `base_url` or in the `SPEAK_TO_AI_MODEL_URL` environment
variable, with optional progress reports. `validate_model` rejects files under
10 MiB. Failures raise `ModelError`.

## The App

`App` is a dataclass whose components are assigned by the caller.
`handle_start_recording` makes sure a model is available and starts the
recorder, updating the tray tooltip with a level bar (`level_tooltip`);
`handle_stop_recording_and_transcribe` stops it and transcribes in a
background thread, giving up after two minutes or when `cancel()` is called.
The transcript is kept in `last_transcript` and typed into the active window.
`handle_show_config` opens the configuration file in `$EDITOR`, or with
`xdg-open`. `run_and_wait` starts the WebSocket server, tray and hotkey
manager, blocks until `cancel()`, SIGINT or SIGTERM, then calls `shutdown`.

## What the package does not do

- It has no command-line entry point and does not read a configuration file;
  `Config` is built in code.
- It does not record audio, listen for hotkeys or draw a tray icon: `App`
  expects recorder, hotkey manager and tray objects to be supplied.
- It includes no speech model backend; `WhisperEngine` needs a loader.

## Tests

The test suite uses pytest, pytest-asyncio and responses, listed in the
`test` extra.