"""
StudyPal - AI Study Pal
Main Flask Application
"""

from flask import Flask, request, jsonify, render_template_string
import json
import time
from datetime import datetime, timezone
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from completion import CompletionClient, GenerationError, VisionError
from config import Config, api_key_configured
from generator import Attachment, StudyGenerator
from render import render_chat_message, render_result, render_search_results
from search import SearchError
from utils import validate_input

# Init Flask
app = Flask(__name__)
app.config.from_object(Config)

if not api_key_configured(app.config["GEMINI_API_KEY"]):
    print("⚠️  Warning: GEMINI_API_KEY not set in .env file")
    print("   Get a free key at: https://aistudio.google.com/app/apikey")

# Init Gemini client + generation service
client = CompletionClient.from_config(app.config)
generator = StudyGenerator(
    client,
    search_url=app.config["SEARCH_URL"],
    search_timeout=app.config["SEARCH_TIMEOUT"],
)


def log_request(mode, start_time, completion=None, input_chars=0, metadata=None):
    """Log request telemetry to the telemetry file (best-effort, non-fatal if it fails)."""
    path = app.config.get("TELEMETRY_PATH")
    if not path:
        return

    log_entry = {
        "timestamp": datetime.now().isoformat(),
        "mode": mode,
        "model": completion.model if completion else None,
        "attempts": completion.attempts if completion else 0,
        "input_chars": input_chars,
        "latency_ms": int((time.time() - start_time) * 1000),
        "metadata": metadata or {},
    }
    try:
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(log_entry) + "\n")
    except OSError:
        pass


class FileTooLarge(RequestEntityTooLarge):
    """A single uploaded file is over MAX_FILE_SIZE."""


def _megabytes(num_bytes):
    return f"{num_bytes // (1024 * 1024)}MB"


def _attachments():
    """Uploaded `file` parts as framework-independent attachments."""
    limit = app.config["MAX_FILE_SIZE"]
    attachments = []
    for f in request.files.getlist("file"):
        if not f.filename:
            continue
        data = f.read()
        if len(data) > limit:
            raise FileTooLarge(f"File too large: {f.filename}. Maximum upload size is {_megabytes(limit)}.")
        attachments.append(Attachment(f.filename, f.mimetype or "", data))
    return attachments


def _generate(mode, key, task):
    """Shared flow for the flashcards / summary / quiz endpoints."""
    start_time = time.time()
    content = ""

    try:
        content = generator.extract_text_content(request.form.get("text", ""), _attachments())
        result, completion = task(content)
    except ValueError as e:
        # No usable text, or an unreadable PDF
        log_request(mode, start_time, metadata={"status": "rejected", "error": str(e)})
        return jsonify({"error": str(e)}), 400
    except (GenerationError, VisionError) as e:
        print(f"{mode} generation error: {e}")
        log_request(mode, start_time, input_chars=len(content), metadata={"error": str(e)})
        return jsonify({"error": str(e)}), 500

    log_request(
        mode,
        start_time,
        completion,
        input_chars=len(content),
        metadata={"fallback_used": completion.attempts > 1},
    )

    payload = {"success": True, key: result}
    payload["html"] = render_result(mode, payload)
    return jsonify(payload)


@app.route("/")
def home():
    """Serve the main HTML interface."""
    return render_template_string(HTML_TEMPLATE)


@app.route("/generate-flashcards", methods=["POST"])
def generate_flashcards():
    """Generate flashcards from text and/or uploaded files."""
    return _generate("flashcards", "flashcards", generator.generate_flashcards)


@app.route("/summarize", methods=["POST"])
def summarize():
    """Summarize text and/or uploaded files."""
    return _generate("summary", "summary", generator.summarize)


@app.route("/generate-quiz", methods=["POST"])
def generate_quiz():
    """Generate a multiple choice quiz from text and/or uploaded files."""
    return _generate("quiz", "quiz", generator.generate_quiz)


@app.route("/chat", methods=["POST"])
def chat():
    """Chat with the study buddy, grounded in the uploaded documents."""
    start_time = time.time()

    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        data = {}
    message = data.get("message")

    validation = validate_input(message, "No message provided")
    if validation["error"]:
        return jsonify({"error": validation["message"]}), 400

    try:
        reply, completion = generator.chat(message, data.get("context"), data.get("history"))
    except GenerationError as e:
        print(f"Chat error: {e}")
        log_request("chat", start_time, input_chars=len(message), metadata={"error": str(e)})
        return jsonify({"success": False, "error": str(e)}), 500

    log_request(
        "chat",
        start_time,
        completion,
        input_chars=len(message),
        metadata={"has_context": bool(data.get("context")), "fallback_used": completion.attempts > 1},
    )
    return jsonify({
        "success": True,
        "response": reply,
        "html": render_chat_message(reply),
    })


@app.route("/search", methods=["GET"])
def search():
    """Instant-answer search with an AI-written summary when possible."""
    start_time = time.time()
    query = request.args.get("q", "")

    validation = validate_input(query, "No search query provided")
    if validation["error"]:
        return jsonify({"error": validation["message"]}), 400
    query = query.strip()

    try:
        result, completion = generator.search(query)
    except SearchError as e:
        print(f"Search error: {e}")
        log_request("search", start_time, input_chars=len(query), metadata={"error": str(e)})
        return jsonify({"success": False, "error": str(e)}), 502

    log_request(
        "search",
        start_time,
        completion,
        input_chars=len(query),
        metadata={"ai_summary": result["aiSummary"] is not None},
    )
    return jsonify({
        "success": True,
        "result": result,
        "html": render_search_results(result, query),
    })


@app.route("/health", methods=["GET"])
def health():
    """Get system status."""
    return jsonify(
        {
            "status": "ok",
            "tokenConfigured": api_key_configured(app.config.get("GEMINI_API_KEY")),
            "models": {
                "text": app.config["TEXT_MODEL"],
                "vision": app.config["VISION_MODEL"],
            },
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )


@app.errorhandler(RequestEntityTooLarge)
def file_too_large(e):
    if isinstance(e, FileTooLarge):
        return jsonify({"error": e.description}), 413
    total = _megabytes(app.config["MAX_CONTENT_LENGTH"])
    return jsonify({"error": f"Upload too large. Maximum request size is {total}."}), 413


@app.errorhandler(Exception)
def server_error(e):
    if isinstance(e, HTTPException):
        return jsonify({"error": e.description}), e.code
    print(f"Server error: {e}")
    return jsonify({"error": "Internal server error"}), 500


HTML_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <title>StudyPal - Your AI Study Pal</title>
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <style>
        @import url('https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&family=Space+Grotesk:wght@500&display=swap');
        :root {
            --bg: #0a0a0a;
            --card: #1a1a1a;
            --accent: #b8bcc8;
            --accent-soft: rgba(184, 188, 200, 0.1);
            --text: #f2f4ff;
            --muted: #a0a0a0;
            --border: rgba(255, 255, 255, 0.08);
            --error-bg: rgba(255, 99, 132, 0.12);
            --error-text: #ff708d;
            --success-bg: rgba(104, 211, 145, 0.12);
            --success-text: #7fd8a6;
        }
        * {
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }
        body {
            font-family: 'Inter', -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
            background: radial-gradient(circle at top, #1a1a1a 0%, #0f0f0f 45%, #0a0a0a 100%);
            color: var(--text);
            min-height: 100vh;
            padding: 32px 20px 60px;
        }
        .container {
            max-width: 920px;
            margin: 0 auto;
        }
        .header, .card {
            background: linear-gradient(160deg, rgba(20, 20, 20, 0.85), rgba(26, 26, 26, 0.95));
            border-radius: 18px;
            padding: 28px;
            margin-bottom: 22px;
            border: 1px solid var(--border);
            box-shadow: 0 20px 60px rgba(0, 0, 0, 0.55);
        }
        .header h1, .card h2 {
            font-family: 'Space Grotesk', 'Inter', sans-serif;
        }
        .header h1 {
            font-size: 2.4em;
            margin-bottom: 12px;
        }
        .header p {
            color: var(--muted);
        }
        .card h2 {
            font-size: 1.35em;
            margin-bottom: 18px;
        }
        .dropzone {
            border: 2px dashed rgba(184, 188, 200, 0.5);
            border-radius: 14px;
            padding: 42px;
            text-align: center;
            cursor: pointer;
            transition: all 0.3s ease;
            background: rgba(15, 15, 15, 0.6);
            color: var(--muted);
        }
        .dropzone:hover, .dropzone.drag-over {
            background: rgba(184, 188, 200, 0.08);
            border-color: var(--accent);
        }
        .dropzone input {
            display: none;
        }
        .file-item {
            display: flex;
            align-items: center;
            gap: 12px;
            background: rgba(18, 18, 18, 0.8);
            padding: 12px;
            border-radius: 10px;
            margin-top: 10px;
            border: 1px solid var(--border);
        }
        .file-info {
            flex: 1;
            min-width: 0;
        }
        .file-name {
            overflow: hidden;
            text-overflow: ellipsis;
            white-space: nowrap;
        }
        .file-size {
            color: var(--muted);
            font-size: 0.85em;
        }
        .file-remove {
            background: none;
            border: none;
            color: var(--muted);
            cursor: pointer;
            font-size: 1.1em;
        }
        .mode-selector, .generate-section {
            display: none;
            gap: 12px;
            margin-top: 18px;
        }
        .mode-selector.visible, .generate-section.visible {
            display: flex;
        }
        .mode-btn {
            flex: 1;
            padding: 14px;
            border: 1px solid var(--border);
            background: rgba(18, 18, 18, 0.8);
            color: var(--muted);
            border-radius: 14px;
            cursor: pointer;
            font-size: 1em;
            font-weight: 600;
        }
        .mode-btn.active {
            background: var(--accent-soft);
            border-color: rgba(184, 188, 200, 0.6);
            color: var(--text);
        }
        .btn {
            background: linear-gradient(120deg, #c8ccd8, #b0b4c0);
            color: #0a0a0a;
            border: none;
            padding: 14px 26px;
            border-radius: 12px;
            cursor: pointer;
            font-size: 1em;
            font-weight: 600;
        }
        .btn:disabled {
            background: rgba(184, 188, 200, 0.25);
            color: rgba(255, 255, 255, 0.4);
            cursor: not-allowed;
        }
        .generate-section .btn {
            flex: 1;
        }
        .text-input {
            flex: 1;
            padding: 14px;
            border: 1px solid var(--border);
            border-radius: 12px;
            font-size: 1em;
            background: rgba(15, 15, 15, 0.6);
            color: var(--text);
        }
        .input-row {
            display: flex;
            gap: 12px;
        }
        .results {
            margin-top: 22px;
        }
        .results-loading {
            text-align: center;
            color: var(--accent);
            padding: 20px;
        }
        .loading-spinner {
            width: 32px;
            height: 32px;
            margin: 0 auto 10px;
            border: 3px solid var(--accent-soft);
            border-top-color: var(--accent);
            border-radius: 50%;
            animation: spin 0.8s linear infinite;
        }
        @keyframes spin {
            to { transform: rotate(360deg); }
        }
        .results-error {
            background: var(--error-bg);
            color: var(--error-text);
            padding: 15px;
            border-radius: 12px;
            border: 1px solid rgba(255, 112, 141, 0.3);
        }
        .flashcards-grid {
            display: grid;
            grid-template-columns: repeat(auto-fill, minmax(240px, 1fr));
            gap: 16px;
        }
        .flashcard {
            perspective: 1000px;
            height: 200px;
            cursor: pointer;
        }
        .flashcard-inner {
            position: relative;
            width: 100%;
            height: 100%;
            transition: transform 0.5s;
            transform-style: preserve-3d;
        }
        .flashcard.flipped .flashcard-inner {
            transform: rotateY(180deg);
        }
        .flashcard-front, .flashcard-back {
            position: absolute;
            inset: 0;
            backface-visibility: hidden;
            border-radius: 14px;
            padding: 18px;
            border: 1px solid var(--border);
            background: rgba(18, 18, 18, 0.9);
            overflow-y: auto;
        }
        .flashcard-back {
            transform: rotateY(180deg);
            background: var(--accent-soft);
        }
        .flashcard-label, .flashcard-hint, .quiz-question-number {
            color: var(--muted);
            font-size: 0.8em;
            margin-bottom: 8px;
        }
        .quiz-question {
            margin-bottom: 24px;
        }
        .quiz-question-text {
            margin-bottom: 12px;
            font-weight: 600;
        }
        .quiz-option {
            display: block;
            width: 100%;
            text-align: left;
            margin: 8px 0;
            padding: 12px;
            border-radius: 10px;
            border: 1px solid var(--border);
            background: rgba(18, 18, 18, 0.8);
            color: var(--text);
            cursor: pointer;
        }
        .quiz-option:disabled {
            cursor: default;
        }
        .quiz-option.correct {
            background: var(--success-bg);
            color: var(--success-text);
        }
        .quiz-option.incorrect {
            background: var(--error-bg);
            color: var(--error-text);
        }
        .quiz-explanation {
            display: none;
            color: var(--muted);
            margin-top: 8px;
        }
        .quiz-explanation.visible {
            display: block;
        }
        .summary-container, .message-content, .search-result-text {
            line-height: 1.6;
        }
        .summary-container ul, .summary-container ol, .message-content ul, .message-content ol {
            margin: 8px 0 8px 22px;
        }
        .chat-messages {
            max-height: 380px;
            overflow-y: auto;
            margin-bottom: 16px;
        }
        .chat-message {
            display: flex;
            gap: 10px;
            margin-bottom: 12px;
        }
        .chat-message.user {
            flex-direction: row-reverse;
        }
        .message-content {
            background: rgba(18, 18, 18, 0.8);
            border: 1px solid var(--border);
            border-radius: 12px;
            padding: 10px 14px;
            max-width: 80%;
        }
        .chat-message.user .message-content {
            background: var(--accent-soft);
        }
        .search-results {
            margin-top: 16px;
        }
        .search-result-item {
            background: rgba(18, 18, 18, 0.8);
            border: 1px solid var(--border);
            border-radius: 12px;
            padding: 14px;
            margin-bottom: 12px;
        }
        .search-result-item.ai-summary {
            border-color: rgba(184, 188, 200, 0.6);
        }
        .search-result-title {
            font-weight: 600;
            margin-bottom: 6px;
        }
        .search-result-link {
            color: var(--accent);
            font-size: 0.9em;
        }
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>📚 StudyPal</h1>
            <p>Turn your notes into flashcards, summaries and quizzes</p>
            <p id="statusText" style="margin-top: 8px; font-size: 0.9em;"></p>
        </div>

        <div class="card">
            <h2>Step 1: Add Study Material</h2>
            <div class="dropzone" id="dropzone">
                <input type="file" id="fileInput" accept=".txt,.md,.pdf,image/*" multiple>
                <p>📄 Drop files here or click to browse</p>
                <p style="font-size: 0.9em;">Text, PDF or images, up to 10MB each</p>
            </div>
            <div id="fileList"></div>

            <div class="mode-selector" id="modeSelector">
                <button class="mode-btn active" data-mode="flashcards">🃏 Flashcards</button>
                <button class="mode-btn" data-mode="summary">📝 Summary</button>
                <button class="mode-btn" data-mode="quiz">🎯 Quiz</button>
            </div>
            <div class="generate-section" id="generateSection">
                <button class="btn" id="generateBtn">Generate Flashcards</button>
            </div>

            <div class="results" id="resultsContainer"></div>
        </div>

        <div class="card">
            <h2>Step 2: Ask Your Study Pal</h2>
            <div class="chat-messages" id="chatMessages"></div>
            <div class="input-row">
                <input type="text" id="chatInput" class="text-input" placeholder="Ask about your material...">
                <button class="btn" id="chatSendBtn">Send</button>
            </div>
        </div>

        <div class="card">
            <h2>Search the Web</h2>
            <div class="input-row">
                <input type="text" id="searchInput" class="text-input" placeholder="Look up a topic...">
                <button class="btn" id="searchBtn">Search</button>
            </div>
            <div class="search-results" id="searchResults"></div>
        </div>
    </div>

    <script>
        const MAX_HISTORY = 10;
        const ENDPOINTS = {
            flashcards: '/generate-flashcards',
            summary: '/summarize',
            quiz: '/generate-quiz'
        };
        const MODE_LABELS = {
            flashcards: 'Generate Flashcards',
            summary: 'Generate Summary',
            quiz: 'Generate Quiz'
        };
        const LOADING_MESSAGES = {
            flashcards: 'Creating flashcards...',
            summary: 'Generating summary...',
            quiz: 'Building quiz questions...'
        };

        // Session state
        const session = {
            files: [],
            mode: 'flashcards',
            documentContext: '',
            history: []
        };

        const dropzone = document.getElementById('dropzone');
        const fileInput = document.getElementById('fileInput');
        const fileList = document.getElementById('fileList');
        const modeSelector = document.getElementById('modeSelector');
        const generateSection = document.getElementById('generateSection');
        const generateBtn = document.getElementById('generateBtn');
        const resultsContainer = document.getElementById('resultsContainer');
        const chatMessages = document.getElementById('chatMessages');
        const chatInput = document.getElementById('chatInput');
        const searchInput = document.getElementById('searchInput');
        const searchResults = document.getElementById('searchResults');

        function escapeHtml(text) {
            const div = document.createElement('div');
            div.textContent = text;
            return div.innerHTML;
        }

        function formatFileSize(bytes) {
            if (bytes === 0) return '0 Bytes';
            const sizes = ['Bytes', 'KB', 'MB', 'GB'];
            const i = Math.min(Math.floor(Math.log(bytes) / Math.log(1024)), sizes.length - 1);
            return parseFloat((bytes / Math.pow(1024, i)).toFixed(2)) + ' ' + sizes[i];
        }

        function showError(message) {
            resultsContainer.innerHTML = `<div class="results-error"><p>❌ ${escapeHtml(message)}</p></div>`;
        }

        function showLoading(message) {
            resultsContainer.innerHTML = `
                <div class="results-loading">
                    <div class="loading-spinner"></div>
                    <p class="loading-text">${escapeHtml(message)}</p>
                </div>
            `;
        }

        async function refreshStatus() {
            try {
                const res = await fetch('/health');
                if (!res.ok) return;
                const data = await res.json();
                document.getElementById('statusText').textContent = data.tokenConfigured
                    ? `✅ Connected (${data.models.text})`
                    : '⚠️ API key not configured on the server.';
            } catch (e) {
                // ignore
            }
        }

        // --- Files ---
        function processFiles(files) {
            for (const file of Array.from(files)) {
                session.files.push({
                    id: Date.now().toString(36) + Math.random().toString(36).slice(2),
                    file: file
                });
            }
            renderFileList();
        }

        function removeFile(id) {
            session.files = session.files.filter(f => f.id !== id);
            renderFileList();
        }

        function renderFileList() {
            fileList.innerHTML = session.files.map(item => `
                <div class="file-item">
                    <div class="file-info">
                        <div class="file-name">${escapeHtml(item.file.name)}</div>
                        <div class="file-size">${formatFileSize(item.file.size)} • ${escapeHtml(item.file.type || 'unknown')}</div>
                    </div>
                    <button class="file-remove" onclick="removeFile('${item.id}')" aria-label="Remove file">✕</button>
                </div>
            `).join('');

            const hasFiles = session.files.length > 0;
            modeSelector.classList.toggle('visible', hasFiles);
            generateSection.classList.toggle('visible', hasFiles);
        }

        dropzone.addEventListener('click', () => fileInput.click());
        fileInput.addEventListener('change', (e) => {
            if (e.target.files.length > 0) {
                processFiles(e.target.files);
                fileInput.value = '';
            }
        });
        ['dragenter', 'dragover'].forEach(name => dropzone.addEventListener(name, (e) => {
            e.preventDefault();
            dropzone.classList.add('drag-over');
        }));
        dropzone.addEventListener('dragleave', (e) => {
            e.preventDefault();
            dropzone.classList.remove('drag-over');
        });
        dropzone.addEventListener('drop', (e) => {
            e.preventDefault();
            dropzone.classList.remove('drag-over');
            if (e.dataTransfer.files.length > 0) {
                processFiles(e.dataTransfer.files);
            }
        });

        // --- Mode ---
        modeSelector.addEventListener('click', (e) => {
            const btn = e.target.closest('.mode-btn');
            if (!btn) return;
            document.querySelectorAll('.mode-btn').forEach(b => b.classList.remove('active'));
            btn.classList.add('active');
            session.mode = btn.dataset.mode;
            generateBtn.textContent = MODE_LABELS[session.mode];
        });

        // --- Generate ---
        function isTextFile(file) {
            return file.type.startsWith('text/') || /\\.(txt|md)$/i.test(file.name);
        }

        async function handleGenerate() {
            if (session.files.length === 0) return;
            generateBtn.disabled = true;

            try {
                let allText = '';
                const formData = new FormData();

                for (const item of session.files) {
                    if (isTextFile(item.file)) {
                        allText += (await item.file.text()) + '\\n\\n';
                    } else if (item.file.type.startsWith('image/') || /\\.pdf$/i.test(item.file.name)) {
                        formData.append('file', item.file);
                    }
                }

                if (allText.trim()) {
                    formData.append('text', allText);
                    session.documentContext = allText;
                }

                showLoading(LOADING_MESSAGES[session.mode]);

                const res = await fetch(ENDPOINTS[session.mode], { method: 'POST', body: formData });
                const data = await res.json();

                if (!res.ok) {
                    throw new Error(data.error || 'Failed to generate content');
                }
                resultsContainer.innerHTML = data.html;
            } catch (err) {
                showError(err.message || 'Failed to generate content. Make sure the server is running.');
            } finally {
                generateBtn.disabled = false;
            }
        }

        generateBtn.addEventListener('click', handleGenerate);

        // --- Quiz ---
        function handleQuizAnswer(button) {
            const questionDiv = button.closest('.quiz-question');
            const correctIndex = questionDiv.dataset.correctIndex;
            const explanation = questionDiv.querySelector('.quiz-explanation');

            questionDiv.querySelectorAll('.quiz-option').forEach(opt => {
                opt.disabled = true;
                if (opt.dataset.index === correctIndex) {
                    opt.classList.add('correct');
                }
            });

            if (!button.classList.contains('correct')) {
                button.classList.add('incorrect');
            }
            button.classList.add('selected');

            if (explanation && explanation.textContent.trim()) {
                explanation.classList.add('visible');
            }
        }

        // --- Chat ---
        function appendChatHtml(html) {
            chatMessages.insertAdjacentHTML('beforeend', html);
            chatMessages.scrollTop = chatMessages.scrollHeight;
        }

        function rememberTurn(role, content) {
            session.history.push({ role: role, content: content });
            if (session.history.length > MAX_HISTORY) {
                session.history = session.history.slice(-MAX_HISTORY);
            }
        }

        function appendAssistantNotice(text) {
            appendChatHtml(`
                <div class="chat-message assistant">
                    <div class="message-avatar">🤖</div>
                    <div class="message-content">${escapeHtml(text)}</div>
                </div>
            `);
            rememberTurn('assistant', text);
        }

        async function handleChatSend() {
            const message = chatInput.value.trim();
            if (!message) return;

            appendChatHtml(`
                <div class="chat-message user">
                    <div class="message-avatar">👤</div>
                    <div class="message-content">${escapeHtml(message)}</div>
                </div>
            `);
            rememberTurn('user', message);
            chatInput.value = '';

            appendChatHtml(`
                <div class="chat-message assistant" id="typing-indicator">
                    <div class="message-avatar">🤖</div>
                    <div class="message-content">Thinking...</div>
                </div>
            `);

            try {
                const res = await fetch('/chat', {
                    method: 'POST',
                    headers: { 'Content-Type': 'application/json' },
                    body: JSON.stringify({
                        message: message,
                        context: session.documentContext,
                        history: session.history.slice(0, -1)
                    })
                });
                const data = await res.json();
                document.getElementById('typing-indicator').remove();

                if (data.success) {
                    appendChatHtml(data.html);
                    rememberTurn('assistant', data.response);
                } else {
                    appendAssistantNotice('Sorry, I encountered an error. Please try again.');
                }
            } catch (err) {
                const typing = document.getElementById('typing-indicator');
                if (typing) typing.remove();
                appendAssistantNotice('Unable to connect to AI. Make sure the server is running.');
            }
        }

        document.getElementById('chatSendBtn').addEventListener('click', handleChatSend);
        chatInput.addEventListener('keypress', (e) => {
            if (e.key === 'Enter' && !e.shiftKey) {
                e.preventDefault();
                handleChatSend();
            }
        });

        // --- Search ---
        async function handleSearch() {
            const query = searchInput.value.trim();
            if (!query) return;

            searchResults.innerHTML = `
                <div class="results-loading">
                    <div class="loading-spinner"></div>
                    <p class="loading-text">Searching and analyzing...</p>
                </div>
            `;

            try {
                const res = await fetch(`/search?q=${encodeURIComponent(query)}`);
                const data = await res.json();

                if (data.success) {
                    searchResults.innerHTML = data.html;
                } else {
                    searchResults.innerHTML = '<div class="search-result-item"><div class="search-result-text">No results found. Try asking the AI chatbot instead!</div></div>';
                }
            } catch (err) {
                searchResults.innerHTML = '<div class="results-error">Search failed. Make sure the server is running.</div>';
            }
        }

        document.getElementById('searchBtn').addEventListener('click', handleSearch);
        searchInput.addEventListener('keypress', (e) => {
            if (e.key === 'Enter') {
                e.preventDefault();
                handleSearch();
            }
        });

        window.removeFile = removeFile;
        window.handleQuizAnswer = handleQuizAnswer;
        refreshStatus();
    </script>
</body>
</html>
"""


if __name__ == "__main__":
    print("🚀 Starting StudyPal...")
    print(f"🔑 API key: {'✓ Configured' if api_key_configured(app.config['GEMINI_API_KEY']) else '✗ Not configured'}")
    print(f"🤖 Model:   {app.config['TEXT_MODEL']}")
    print(f"🌐 Open http://localhost:{app.config['PORT']} in your browser")
    app.run(debug=app.config["DEBUG"], port=app.config["PORT"])
