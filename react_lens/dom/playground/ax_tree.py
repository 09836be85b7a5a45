import asyncio
import json
import os

import aiofiles
import httpx
from cdp_use import CDPClient
from playwright.async_api import async_playwright

from react_lens import ReactInspector, ToolFailure, setup_logging

TARGET_URL = os.getenv('TARGET_URL', 'http://localhost:3000')
DEBUG_PORT = 9222


async def test_snapshot_and_lookup():
	setup_logging()
	async with async_playwright() as p:
		browser = await p.chromium.launch(args=[f'--remote-debugging-port={DEBUG_PORT}'], headless=False)
		page = await browser.new_page()
		await page.goto(TARGET_URL, wait_until='domcontentloaded')

		async with httpx.AsyncClient() as client:
			version_info = await client.get(f'http://localhost:{DEBUG_PORT}/json/version')
			browser_ws_url = version_info.json()['webSocketDebuggerUrl']

		async with CDPClient(browser_ws_url) as cdp:
			inspector = await ReactInspector.connect(cdp, url=page.url)

			snapshot_result = await inspector.take_snapshot(verbose=True)
			if isinstance(snapshot_result, ToolFailure):
				print(f'Snapshot failed: {snapshot_result.error}')
				return

			if not os.path.exists('tmp/ax_tree'):
				os.makedirs('tmp/ax_tree')
			async with aiofiles.open('tmp/ax_tree/snapshot.json', 'w') as f:
				await f.write(json.dumps(snapshot_result.snapshot.model_dump(mode='json'), indent=2))

			# resolve the component behind every button in the snapshot
			for node in snapshot_result.snapshot.root.iter_nodes():
				if node.role != 'button' or node.backend_dom_node_id is None:
					continue
				lookup = await inspector.get_component_for_backend_node(node.backend_dom_node_id)
				if isinstance(lookup, ToolFailure):
					print(f'[{node.uid}] button "{node.name}": {lookup.error}')
				elif lookup.component is None:
					print(f'[{node.uid}] button "{node.name}": no component within {lookup.steps} steps')
				else:
					owners = ' < '.join(owner.name for owner in lookup.component.owners or [])
					print(f'[{node.uid}] button "{node.name}" -> {lookup.component.name} ({owners})')


if __name__ == '__main__':
	asyncio.run(test_snapshot_and_lookup())
