import asyncio
import json
import os
import time

import aiofiles
import httpx
import tiktoken
from cdp_use import CDPClient
from playwright.async_api import async_playwright

from react_lens import InspectorProfile, ReactInspector, ToolFailure, setup_logging

TARGET_URL = os.getenv('TARGET_URL', 'http://localhost:3000')
DEBUG_PORT = 9222


async def test_component_map():
	setup_logging()
	async with async_playwright() as p:
		browser = await p.chromium.launch(args=[f'--remote-debugging-port={DEBUG_PORT}'], headless=False)
		page = await browser.new_page()

		async with httpx.AsyncClient() as client:
			version_info = await client.get(f'http://localhost:{DEBUG_PORT}/json/version')
			browser_ws_url = version_info.json()['webSocketDebuggerUrl']

		async with CDPClient(browser_ws_url) as cdp:
			inspector = await ReactInspector.connect(cdp, url=page.url, profile=InspectorProfile.from_env())

			# install before navigating so the hook is in place when React loads
			attach = await inspector.ensure_attached()
			print(f'Attached: {attach.attached} {attach.message or ""}')

			await page.goto(TARGET_URL, wait_until='domcontentloaded')
			await asyncio.sleep(1)

			while True:
				attach = await inspector.ensure_attached()
				for renderer in attach.renderers:
					print(f'- id={renderer.id} name={renderer.name} version={renderer.version} bundleType={renderer.bundle_type}')

				start_time = time.time()
				result = await inspector.get_component_map(verbose=False, include_state=True)
				print(f'Component map took {time.time() - start_time:.2f} seconds')

				if isinstance(result, ToolFailure):
					print(f'Failed: {result.error}')
				else:
					print(f'  - Nodes: {result.tree.total_nodes}')
					print(f'  - Components: {result.tree.component_nodes}')
					print(f'  - Correlated: {result.tree.correlated_nodes}')

					encoding = tiktoken.encoding_for_model('gpt-4o')
					print(f'Component map token count: {len(encoding.encode(result.text))}')

					os.makedirs('tmp', exist_ok=True)
					async with aiofiles.open('tmp/component_map.txt', 'w') as f:
						await f.write(result.text)
					async with aiofiles.open('tmp/component_map.json', 'w') as f:
						await f.write(json.dumps(result.tree.model_dump(mode='json'), indent=2))
					print('Saved component map to tmp/component_map.txt and tmp/component_map.json')

					print('\nFirst 20 lines:')
					for line in result.text.split('\n')[:20]:
						print(line)

				input('Press Enter to take another map...')


if __name__ == '__main__':
	asyncio.run(test_component_map())
