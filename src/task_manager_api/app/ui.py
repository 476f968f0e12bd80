from __future__ import annotations

import html

_PAGE = """
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>__APP_NAME__ Task Board</title>
  <link rel="preconnect" href="https://fonts.googleapis.com">
  <link rel="preconnect" href="https://fonts.gstatic.com" crossorigin>
  <link
    href="https://fonts.googleapis.com/css2?family=Space+Grotesk:wght@400;500;700&display=swap"
    rel="stylesheet"
  >
  <link
    href="https://fonts.googleapis.com/css2?family=IBM+Plex+Mono:wght@400;500&display=swap"
    rel="stylesheet"
  >
  <style>
    :root {
      --bg: #f3efe6;
      --panel: #fffaf0;
      --ink: #112433;
      --muted: #5c6b74;
      --accent: #0f8b8d;
      --accent-strong: #136f63;
      --line: #d7d1c3;
      --warn: #b00020;
      --urgent: #b00020;
      --high: #c26a00;
      --medium: #0f8b8d;
      --low: #5c6b74;
    }
    * { box-sizing: border-box; }
    body {
      margin: 0;
      min-height: 100vh;
      font-family: "Space Grotesk", sans-serif;
      color: var(--ink);
      background:
        radial-gradient(circle at 10% 10%, #b6e3df 0%, transparent 45%),
        radial-gradient(circle at 90% 90%, #f6d7b0 0%, transparent 40%),
        var(--bg);
    }
    .wrap {
      max-width: 1100px;
      margin: 24px auto 40px;
      padding: 0 16px;
      display: grid;
      gap: 16px;
    }
    .card {
      background: var(--panel);
      border: 1px solid var(--line);
      border-radius: 16px;
      padding: 16px;
      box-shadow: 0 8px 20px rgba(17, 36, 51, 0.06);
    }
    .hero { display: flex; justify-content: space-between; align-items: center; gap: 12px; }
    .title { margin: 0; font-size: clamp(1.3rem, 2.6vw, 2rem); }
    .sub { margin: 6px 0 0; color: var(--muted); }
    .pill {
      border: 1px solid var(--line);
      border-radius: 999px;
      padding: 6px 10px;
      font-family: "IBM Plex Mono", monospace;
      font-size: 0.78rem;
      white-space: nowrap;
    }
    .grid { display: grid; grid-template-columns: 1fr 1fr; gap: 12px; }
    label { display: block; margin-bottom: 6px; font-weight: 700; font-size: 0.92rem; }
    textarea, input, select {
      width: 100%;
      border: 1px solid var(--line);
      border-radius: 12px;
      padding: 9px 12px;
      font-family: "IBM Plex Mono", monospace;
      font-size: 0.9rem;
      background: #fff;
      color: var(--ink);
    }
    textarea { min-height: 80px; resize: vertical; }
    .row { display: flex; gap: 10px; flex-wrap: wrap; align-items: end; }
    .row > div { flex: 1 1 150px; }
    button {
      border: none;
      border-radius: 10px;
      padding: 9px 14px;
      font-family: "Space Grotesk", sans-serif;
      font-weight: 700;
      cursor: pointer;
    }
    .primary { background: var(--accent); color: #fff; }
    .secondary { background: #edf6f5; color: var(--accent-strong); }
    .danger { background: #ffe8ec; color: var(--warn); }
    .status { margin: 10px 0 0; font-family: "IBM Plex Mono", monospace; font-size: 0.88rem; }
    .error { color: var(--warn); }
    .stats { display: grid; grid-template-columns: repeat(4, 1fr); gap: 10px; }
    .stat { border: 1px solid var(--line); border-radius: 12px; padding: 10px; }
    .stat strong { display: block; font-size: 1.5rem; }
    .tasks { display: grid; gap: 10px; }
    .task {
      border: 1px solid var(--line);
      border-left: 6px solid var(--medium);
      border-radius: 12px;
      padding: 12px;
      background: #fff;
    }
    .task.urgent { border-left-color: var(--urgent); }
    .task.high { border-left-color: var(--high); }
    .task.low { border-left-color: var(--low); }
    .task h3 { margin: 0 0 4px; font-size: 1.05rem; }
    .task.completed h3, .task.cancelled h3 { text-decoration: line-through; color: var(--muted); }
    .meta { font-family: "IBM Plex Mono", monospace; font-size: 0.78rem; color: var(--muted); }
    .actions { margin-top: 8px; display: flex; gap: 8px; flex-wrap: wrap; }
    .hidden { display: none; }
    @media (max-width: 780px) {
      .grid, .stats { grid-template-columns: 1fr; }
    }
  </style>
</head>
<body>
  <main class="wrap">
    <section class="hero">
      <div>
        <h1 class="title">__APP_NAME__ Task Board</h1>
        <p class="sub">Create, filter, and track standard, recurring, and subtask items.</p>
      </div>
      <span class="pill">FastAPI + in-memory store</span>
    </section>

    <section class="card">
      <form id="taskForm">
        <div class="grid">
          <div>
            <label for="taskTitle">Title</label>
            <input id="taskTitle" maxlength="200" required>
          </div>
          <div class="row">
            <div>
              <label for="taskPriority">Priority</label>
              <select id="taskPriority">
                <option value="low">Low</option>
                <option value="medium" selected>Medium</option>
                <option value="high">High</option>
                <option value="urgent">Urgent</option>
              </select>
            </div>
            <div>
              <label for="taskType">Type</label>
              <select id="taskType">
                <option value="standard" selected>Standard</option>
                <option value="recurring">Recurring</option>
                <option value="subtask">Subtask</option>
              </select>
            </div>
          </div>
          <div>
            <label for="taskDescription">Description</label>
            <textarea id="taskDescription" maxlength="1000"></textarea>
          </div>
          <div>
            <div id="standardFields">
              <label for="taskDueDate">Due date</label>
              <input id="taskDueDate" type="date">
            </div>
            <div id="recurringFields" class="row hidden">
              <div>
                <label for="recurrencePattern">Repeats</label>
                <select id="recurrencePattern">
                  <option value="daily">Daily</option>
                  <option value="weekly">Weekly</option>
                  <option value="monthly">Monthly</option>
                </select>
              </div>
              <div>
                <label for="recurrenceInterval">Every</label>
                <input id="recurrenceInterval" type="number" min="1" value="1">
              </div>
            </div>
            <div id="subtaskFields" class="hidden">
              <label for="parentTaskId">Parent task</label>
              <select id="parentTaskId"></select>
            </div>
          </div>
        </div>
        <div class="row" style="margin-top: 12px;">
          <button class="primary" type="submit">Create Task</button>
        </div>
      </form>
      <p class="status" id="statusText">Ready.</p>
    </section>

    <section class="card">
      <label>Statistics</label>
      <div class="stats" id="stats"></div>
    </section>

    <section class="card">
      <div class="row">
        <div>
          <label for="filterStatus">Status</label>
          <select id="filterStatus">
            <option value="">All</option>
            <option value="pending">Pending</option>
            <option value="in-progress">In progress</option>
            <option value="completed">Completed</option>
            <option value="cancelled">Cancelled</option>
          </select>
        </div>
        <div>
          <label for="filterPriority">Priority</label>
          <select id="filterPriority">
            <option value="">All</option>
            <option value="low">Low</option>
            <option value="medium">Medium</option>
            <option value="high">High</option>
            <option value="urgent">Urgent</option>
          </select>
        </div>
        <div>
          <label for="filterSearch">Search</label>
          <input id="filterSearch" placeholder="title or description">
        </div>
        <div>
          <label for="sortField">Sort by</label>
          <select id="sortField">
            <option value="createdAt">Created</option>
            <option value="updatedAt">Updated</option>
            <option value="priority">Priority</option>
            <option value="title">Title</option>
          </select>
        </div>
        <div>
          <label for="sortOrder">Order</label>
          <select id="sortOrder">
            <option value="desc">Descending</option>
            <option value="asc">Ascending</option>
          </select>
        </div>
      </div>
    </section>

    <section class="card">
      <label>Tasks</label>
      <div class="tasks" id="taskList"></div>
    </section>
  </main>

  <script>
    const statusText = document.getElementById("statusText");
    const taskList = document.getElementById("taskList");
    const typeSelect = document.getElementById("taskType");
    let parentCandidates = [];

    function setStatus(message, isError = false) {
      statusText.textContent = message;
      statusText.classList.toggle("error", isError);
    }

    function escapeHtml(value) {
      const div = document.createElement("div");
      div.textContent = value == null ? "" : String(value);
      return div.innerHTML;
    }

    async function api(url, options = {}) {
      const response = await fetch(url, {
        headers: { "Content-Type": "application/json" },
        ...options,
      });
      const payload = await response.json();
      if (!payload.success) {
        throw new Error(payload.error || `Request failed (${response.status})`);
      }
      return payload.data;
    }

    function currentQuery() {
      const params = new URLSearchParams();
      const status = document.getElementById("filterStatus").value;
      const priority = document.getElementById("filterPriority").value;
      const search = document.getElementById("filterSearch").value.trim();
      if (status) params.append("status", status);
      if (priority) params.append("priority", priority);
      if (search) params.append("search", search);
      params.append("sortField", document.getElementById("sortField").value);
      params.append("sortOrder", document.getElementById("sortOrder").value);
      return params.toString();
    }

    function renderTask(task) {
      const terminal = task.status === "completed" || task.status === "cancelled";
      const extra = task.type === "recurring"
        ? ` | every ${task.recurrence.interval} ${task.recurrence.pattern}`
        : task.type === "subtask"
          ? ` | parent ${escapeHtml(task.parentTaskId.slice(0, 8))}`
          : task.dueDate ? ` | due ${escapeHtml(task.dueDate.slice(0, 10))}` : "";
      const actions = terminal ? "" : `
        <button class="secondary" data-action="in-progress" data-id="${task.id}">Start</button>
        <button class="primary" data-action="completed" data-id="${task.id}">Complete</button>
        <button class="danger" data-action="cancelled" data-id="${task.id}">Cancel</button>`;
      return `
        <article class="task ${task.priority} ${task.status}">
          <h3>${escapeHtml(task.title)}</h3>
          <div>${escapeHtml(task.description || "")}</div>
          <div class="meta">${task.type} | ${task.status} | ${task.priority}${extra}</div>
          <div class="actions">
            ${actions}
            <button class="danger" data-action="delete" data-id="${task.id}">Delete</button>
          </div>
        </article>`;
    }

    async function loadTasks() {
      try {
        const tasks = await api(`/api/tasks?${currentQuery()}`);
        taskList.innerHTML = tasks.length
          ? tasks.map(renderTask).join("")
          : "<p class=\\"meta\\">No tasks match the current filters.</p>";
      } catch (err) {
        setStatus(String(err.message || err), true);
      }
    }

    async function loadParents() {
      parentCandidates = await api("/api/tasks?sortField=title&sortOrder=asc");
      document.getElementById("parentTaskId").innerHTML = parentCandidates
        .map((task) => `<option value="${task.id}">${escapeHtml(task.title)}</option>`)
        .join("");
    }

    async function loadStatistics() {
      const stats = await api("/api/statistics");
      document.getElementById("stats").innerHTML = `
        <div class="stat"><strong>${stats.total}</strong>Total</div>
        <div class="stat"><strong>${stats.byStatus.pending}</strong>Pending</div>
        <div class="stat"><strong>${stats.byStatus["in-progress"]}</strong>In progress</div>
        <div class="stat"><strong>${stats.byStatus.completed}</strong>Completed</div>`;
    }

    async function refresh() {
      await Promise.all([loadTasks(), loadStatistics(), loadParents()]);
    }

    function toggleTypeFields() {
      const type = typeSelect.value;
      document.getElementById("standardFields").classList.toggle("hidden", type !== "standard");
      document.getElementById("recurringFields").classList.toggle("hidden", type !== "recurring");
      document.getElementById("subtaskFields").classList.toggle("hidden", type !== "subtask");
    }

    document.getElementById("taskForm").addEventListener("submit", async (event) => {
      event.preventDefault();
      const type = typeSelect.value;
      const body = {
        title: document.getElementById("taskTitle").value,
        description: document.getElementById("taskDescription").value,
        priority: document.getElementById("taskPriority").value,
        type,
      };
      const dueDate = document.getElementById("taskDueDate").value;
      if (type === "standard" && dueDate) body.dueDate = `${dueDate}T00:00:00Z`;
      if (type === "recurring") {
        body.recurrence = {
          pattern: document.getElementById("recurrencePattern").value,
          interval: Number(document.getElementById("recurrenceInterval").value),
        };
      }
      if (type === "subtask") body.parentTaskId = document.getElementById("parentTaskId").value;
      try {
        const task = await api("/api/tasks", { method: "POST", body: JSON.stringify(body) });
        event.target.reset();
        toggleTypeFields();
        setStatus(`Created "${task.title}".`);
        await refresh();
      } catch (err) {
        setStatus(String(err.message || err), true);
      }
    });

    taskList.addEventListener("click", async (event) => {
      const button = event.target.closest("button[data-action]");
      if (!button) return;
      const { action, id } = button.dataset;
      try {
        if (action === "delete") {
          await api(`/api/tasks/${id}`, { method: "DELETE" });
          setStatus("Task deleted.");
        } else {
          const task = await api(`/api/tasks/${id}`, {
            method: "PATCH",
            body: JSON.stringify({ status: action }),
          });
          setStatus(`"${task.title}" is now ${task.status}.`);
        }
        await refresh();
      } catch (err) {
        setStatus(String(err.message || err), true);
      }
    });

    typeSelect.addEventListener("change", toggleTypeFields);
    for (const id of ["filterStatus", "filterPriority", "sortField", "sortOrder"]) {
      document.getElementById(id).addEventListener("change", loadTasks);
    }
    document.getElementById("filterSearch").addEventListener("input", loadTasks);

    refresh();
  </script>
</body>
</html>
"""


def render_homepage(*, app_name: str) -> str:
    return _PAGE.replace("__APP_NAME__", html.escape(app_name))
