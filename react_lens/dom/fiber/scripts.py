# @file purpose: JavaScript evaluated inside the inspected page

import json

LENS_TABLE_VERSION = 1

# Creates or joins the hook. The registration table lives at hook.__lens__;
# wrappers resolve the table at call time so a newer table version is picked
# up without rewrapping.
HOOK_BOOTSTRAP = """
(function installReactLensHook(hookName, version) {
	const g = globalThis;
	let hook = g[hookName];
	if (hook && hook.__lens__ && hook.__lens__.version >= version) {
		return {installed: true, created: false, token: hook.__lens__.token, version: hook.__lens__.version};
	}
	const created = !hook;
	if (!hook) {
		const noop = function () {};
		hook = {
			supportsFiber: true,
			renderers: new Map(),
			checkDCE: noop,
			onScheduleFiberRoot: noop,
			onCommitFiberUnmount: noop,
			onPostCommitFiberRoot: noop,
			setStrictMode: noop,
		};
	}
	hook.supportsFiber = true;
	if (!(hook.renderers instanceof Map)) {
		const adopted = new Map();
		if (hook.renderers && typeof hook.renderers.forEach === 'function') {
			hook.renderers.forEach(function (entry, key) {
				if (Array.isArray(entry)) adopted.set(entry[0], entry[1]);
				else adopted.set(key, entry);
			});
		}
		hook.renderers = adopted;
	}

	const previous = hook.__lens__;
	const table = {
		version: version,
		token: previous ? previous.token : Math.random().toString(36).slice(2) + Date.now().toString(36),
		renderers: hook.renderers,
		roots: previous ? previous.roots : new Map(),
	};
	if (!previous && typeof hook.getFiberRoots === 'function') {
		table.renderers.forEach(function (_renderer, id) {
			const known = hook.getFiberRoots(id);
			if (known && known.size) table.roots.set(id, new Set(known));
		});
	}

	const nextRendererId = function () {
		let max = 0;
		hook.__lens__.renderers.forEach(function (_renderer, id) {
			if (typeof id === 'number' && id > max) max = id;
		});
		return max + 1;
	};

	const inject = hook.inject;
	if (!(inject && inject.__lensWrapped__)) {
		const wrappedInject = function (renderer) {
			let id;
			if (typeof inject === 'function') id = inject.apply(this, arguments);
			const lens = hook.__lens__;
			if (typeof id !== 'number') id = nextRendererId();
			if (!lens.renderers.has(id)) lens.renderers.set(id, renderer);
			return id;
		};
		wrappedInject.__lensWrapped__ = true;
		hook.inject = wrappedInject;
	}

	const onCommit = hook.onCommitFiberRoot;
	if (!(onCommit && onCommit.__lensWrapped__)) {
		const wrappedCommit = function (rendererId, root) {
			const lens = hook.__lens__;
			let roots = lens.roots.get(rendererId);
			if (!roots) {
				roots = new Set();
				lens.roots.set(rendererId, roots);
			}
			const mounted = root && root.current && root.current.child;
			if (mounted) roots.add(root);
			else roots.delete(root);
			if (typeof onCommit === 'function') {
				try {
					return onCommit.apply(this, arguments);
				} catch (e) {}
			}
		};
		wrappedCommit.__lensWrapped__ = true;
		hook.onCommitFiberRoot = wrappedCommit;
	}

	hook.getFiberRoots = hook.getFiberRoots || function (id) {
		return hook.__lens__.roots.get(id) || new Set();
	};
	hook.__lens__ = table;
	g[hookName] = hook;
	return {installed: true, created: created, token: table.token, version: version};
})
"""

HOOK_STATUS = """
(function readReactLensStatus(hookName) {
	const hook = globalThis[hookName];
	const pageId = String(performance.timeOrigin);
	if (!hook || !hook.__lens__) return {installed: false, page_id: pageId};
	const lens = hook.__lens__;
	const renderers = [];
	lens.renderers.forEach(function (renderer, id) {
		renderers.push({
			id: id,
			name: renderer && renderer.rendererPackageName ? String(renderer.rendererPackageName) : null,
			version: renderer && renderer.rendererVersion ? String(renderer.rendererVersion) : null,
			bundle_type: renderer && typeof renderer.bundleType === 'number' ? renderer.bundleType : null,
		});
	});
	const roots = {};
	lens.roots.forEach(function (set, id) {
		roots[String(id)] = set.size;
	});
	return {installed: true, page_id: pageId, token: lens.token, version: lens.version, renderers: renderers, roots: roots};
})
"""

# Exports every fiber under every registered root, plus bounded props/state,
# as a flat heap. Non-primitive values become slots referenced as {"$ref": n}.
# DOM nodes owned by host fibers are also returned by reference in `hosts`.
FIBER_GRAPH_DUMP = """
(function dumpReactLensGraph(options) {
	const hook = globalThis[options.hookName];
	const lens = hook && hook.__lens__;
	if (!lens) return {json: JSON.stringify({installed: false}), hosts: []};

	const heap = [];
	const ids = new Map();
	const jobs = [];
	const hosts = [];
	let fiberCount = 0;
	const HOST_TAGS = [5, 6, 26, 27];

	const isFiber = function (value) {
		return typeof value === 'object' && 'tag' in value && 'memoizedProps' in value && 'return' in value && 'sibling' in value;
	};
	const isDomNode = function (value) {
		return typeof Node !== 'undefined' && value instanceof Node;
	};
	const stub = function (reason) {
		heap.push({kind: 'truncated', reason: reason});
		return {$ref: heap.length - 1};
	};
	const ref = function (value, depth) {
		if (value === null || value === undefined) return null;
		const t = typeof value;
		if (t === 'string' || t === 'boolean') return value;
		if (t === 'number') return Number.isFinite(value) ? value : String(value);
		if (t === 'bigint' || t === 'symbol') return value.toString();
		if (ids.has(value)) return {$ref: ids.get(value)};
		const fiber = t === 'object' && isFiber(value);
		if (fiber) {
			if (fiberCount >= options.maxFibers) return stub('fiber-limit');
			fiberCount++;
		} else if (depth > options.exportDepth) {
			return stub('depth');
		}
		const id = heap.length;
		ids.set(value, id);
		heap.push(null);
		jobs.push([id, value, depth, fiber]);
		return {$ref: id};
	};
	const read = function (value, key) {
		try {
			return value[key];
		} catch (e) {
			return '[Unreadable]';
		}
	};
	const pendingHosts = new Map();
	const markHost = function (encoded, node) {
		if (!encoded || encoded.$ref === undefined) return;
		const slot = heap[encoded.$ref];
		if (slot === null) pendingHosts.set(encoded.$ref, node);
		else if (slot.kind === 'dom' && slot.hostIndex === null) slot.hostIndex = hosts.push(node) - 1;
	};

	const fill = function (id, value, depth, fiber) {
		if (fiber) {
			const isHost = HOST_TAGS.indexOf(value.tag) !== -1;
			const entry = {
				kind: 'fiber',
				tag: value.tag,
				key: value.key === null || value.key === undefined ? null : String(value.key),
				type: ref(value.type, 0),
				elementType: ref(value.elementType, 0),
				memoizedProps: ref(value.memoizedProps, 0),
				memoizedState: ref(value.memoizedState, 0),
				stateNode: null,
				return: ref(value.return, 0),
				child: ref(value.child, 0),
				sibling: ref(value.sibling, 0),
			};
			if (isHost && value.stateNode && isDomNode(value.stateNode)) {
				entry.stateNode = ref(value.stateNode, 0);
				markHost(entry.stateNode, value.stateNode);
			}
			heap[id] = entry;
			return;
		}
		if (isDomNode(value)) {
			const entry = {kind: 'dom', nodeName: String(value.nodeName), hostIndex: null};
			if (pendingHosts.has(id)) {
				entry.hostIndex = hosts.push(value) - 1;
				pendingHosts.delete(id);
			}
			heap[id] = entry;
			return;
		}
		if (typeof value === 'function') {
			const displayName = read(value, 'displayName');
			heap[id] = {
				kind: 'function',
				name: typeof value.name === 'string' ? value.name : null,
				displayName: typeof displayName === 'string' ? displayName : null,
			};
			return;
		}
		if (Array.isArray(value)) {
			heap[id] = {
				kind: 'array',
				length: value.length,
				items: value.slice(0, options.exportItems).map(function (item) {
					return ref(item, depth + 1);
				}),
			};
			return;
		}
		if (value instanceof Set) {
			heap[id] = {
				kind: 'array',
				length: value.size,
				items: Array.from(value).slice(0, options.exportItems).map(function (item) {
					return ref(item, depth + 1);
				}),
			};
			return;
		}
		const entries = [];
		if (value instanceof Map) {
			let count = 0;
			value.forEach(function (item, key) {
				if (count++ < options.exportKeys) entries.push([String(key), ref(item, depth + 1)]);
			});
		} else {
			let keys = [];
			try {
				keys = Object.keys(value);
			} catch (e) {}
			for (const key of keys.slice(0, options.exportKeys)) {
				entries.push([key, ref(read(value, key), depth + 1)]);
			}
		}
		const ctor = value.constructor && value.constructor !== Object ? value.constructor.name : null;
		heap[id] = {kind: 'object', ctor: typeof ctor === 'string' ? ctor : null, entries: entries};
	};

	const renderers = [];
	lens.renderers.forEach(function (renderer, id) {
		renderers.push({
			id: id,
			name: renderer && renderer.rendererPackageName ? String(renderer.rendererPackageName) : null,
			version: renderer && renderer.rendererVersion ? String(renderer.rendererVersion) : null,
			bundle_type: renderer && typeof renderer.bundleType === 'number' ? renderer.bundleType : null,
		});
	});
	const roots = [];
	lens.roots.forEach(function (set, rendererId) {
		let index = 0;
		set.forEach(function (root) {
			roots.push({rendererId: rendererId, rootIndex: index++, current: ref(root.current, 0)});
		});
	});
	for (let i = 0; i < jobs.length; i++) {
		const job = jobs[i];
		fill(job[0], job[1], job[2], job[3]);
	}

	const payload = {installed: true, token: lens.token, version: lens.version, renderers: renderers, roots: roots, heap: heap};
	return {json: JSON.stringify(payload), hosts: hosts};
})
"""

READ_JSON_FIELD = 'function () { return this.json; }'
READ_HOSTS_FIELD = 'function () { return this.hosts; }'


def invoke(script: str, *args) -> str:
	"""Render a call of one of the page functions above with JSON-encoded arguments."""
	rendered_args = ', '.join(json.dumps(arg) for arg in args)
	return f'{script.strip()}({rendered_args})'
